"""
DataclassCmdParser - declarative command line parsing onto dataclasses.

This package parses command lines of the form ``program <command> --option value``
into instances of per-command options classes. Commands and their options are
declared with a fluent setup API, values are converted by typed value parsers,
all input errors are collected instead of raised, and help texts are generated
from the same declarations. Default option values can be loaded from YAML or
JSON files.

The package logs through loguru and is disabled by default; enable it with
``logger.enable("dataclass_cmdparser")``.
"""

from loguru import logger

from .builders import (
    CommandSetup,
    DefaultCommandSetup,
    NamedCommandSetup,
    OptionSetup,
    ParserSetup,
    register_setup,
)
from .commands import CommandParser, CommandValidatorContext, UnmappedFieldError
from .errors import (
    DuplicateError,
    InvalidArgumentError,
    InvalidError,
    InvalidOptionError,
    MissingCommandError,
    MissingError,
    MoreThanOneCommandError,
    MultipleValuesError,
    ParseError,
    UnknownCommandError,
    UnknownError,
    UnknownTermError,
    ValueFormatError,
    ValueMissingError,
    ValueParserError,
)
from .helptext import word_wrap
from .names import Name, Role
from .parser import Parser
from .results import ParseResult
from .tokens import CommandToken, OptionToken, tokenize
from .values import (
    ChoiceParser,
    DateTimeParser,
    DecimalParser,
    EnumParser,
    FieldBinding,
    FlagParser,
    FloatParser,
    IntParser,
    MultiValueParser,
    PathParser,
    SingleValueParser,
    StringParser,
    TimeDeltaParser,
    UUIDParser,
    ValueKind,
    ValueParser,
    multi_value,
    parser_for_type,
    register_parser,
)

logger.disable(__name__)

__version__ = "1.0.0"
__all__ = [
    "ChoiceParser",
    "CommandParser",
    "CommandSetup",
    "CommandToken",
    "CommandValidatorContext",
    "DateTimeParser",
    "DecimalParser",
    "DefaultCommandSetup",
    "DuplicateError",
    "EnumParser",
    "FieldBinding",
    "FlagParser",
    "FloatParser",
    "IntParser",
    "InvalidArgumentError",
    "InvalidError",
    "InvalidOptionError",
    "MissingCommandError",
    "MissingError",
    "MoreThanOneCommandError",
    "MultiValueParser",
    "MultipleValuesError",
    "Name",
    "NamedCommandSetup",
    "OptionSetup",
    "OptionToken",
    "ParseError",
    "ParseResult",
    "Parser",
    "ParserSetup",
    "PathParser",
    "Role",
    "SingleValueParser",
    "StringParser",
    "TimeDeltaParser",
    "UUIDParser",
    "UnknownCommandError",
    "UnknownError",
    "UnknownTermError",
    "UnmappedFieldError",
    "ValueFormatError",
    "ValueKind",
    "ValueMissingError",
    "ValueParser",
    "ValueParserError",
    "multi_value",
    "parser_for_type",
    "register_parser",
    "register_setup",
    "tokenize",
    "word_wrap",
]
