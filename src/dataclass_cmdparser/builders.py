"""
Fluent setup API.

Every method returns the setup object it was called on (or, for ``command``,
``option`` and ``argument``, the setup object of the new element), so a whole
command can be declared in one chain:

    setup = parser.setup
    setup.program_name("tool").banner("Tool 1.0")

    date = setup.command(DateOptions).name("date").help("Date arithmetic.")
    date.option("date").short_name("d").format("%Y-%m-%d")
    date.option("offset").required()

Mistakes in the setup (duplicate names, invalid names, unknown fields) raise
immediately; they are programming errors, not user errors.
"""

import os
from typing import TYPE_CHECKING, Any, Callable, Optional, TextIO, Type, Union

from loguru import logger

from .commands import CommandParser, CommandValidatorContext, default_command_name
from .config_file import load_config_file
from .names import Role
from .values import (
    DateTimeParser,
    EnumParser,
    FlagParser,
    IntParser,
    PathParser,
    UUIDParser,
    ValueParser,
)

if TYPE_CHECKING:
    from .parser import Parser


class OptionSetup:
    """Settings shared by every option and argument."""

    def __init__(self, command_parser: CommandParser, value_parser: ValueParser) -> None:
        self._command_parser = command_parser
        self.value_parser = value_parser

    def name(self, name: str) -> "OptionSetup":
        """
        Set the long name, used as ``--name``.

        Raises:
            ValueError: If the name is invalid or used by another option of the command.
        """
        self._command_parser.rename(self.value_parser, self.value_parser.name.with_name(name))
        return self

    def short_name(self, short_name: str) -> "OptionSetup":
        """Set the single character short name, used as ``-n``."""
        self._command_parser.rename(
            self.value_parser, self.value_parser.name.with_short_name(short_name)
        )
        return self

    def help(self, help: str) -> "OptionSetup":
        if help is None:
            raise TypeError("help() argument 'help' must not be None")
        self.value_parser.help = help
        return self


class FlagSetup(OptionSetup):
    def default_value(self, value: bool) -> "FlagSetup":
        self.value_parser.default = bool(value)
        return self


class ValueSetup(OptionSetup):
    """Settings of options and arguments that take values."""

    def required(self, required: bool = True) -> "ValueSetup":
        self.value_parser.is_required = required
        return self

    def default_value(self, value: Any) -> "ValueSetup":
        """Set the value bound when the option is not given."""
        self.value_parser.default = value
        return self


class IntSetup(ValueSetup):
    def range(
        self, minimum: Optional[int] = None, maximum: Optional[int] = None
    ) -> "IntSetup":
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ValueError(f"Minimum {minimum} is greater than maximum {maximum}.")
        self.value_parser.minimum = minimum
        self.value_parser.maximum = maximum
        return self


class DateTimeSetup(ValueSetup):
    def format(self, format: str) -> "DateTimeSetup":
        """Require values in this ``datetime.strptime`` format instead of ISO 8601."""
        if not format:
            raise ValueError("Date format must be a non-empty string.")
        self.value_parser.format = format
        return self

    def assume_utc(self, assume_utc: bool = True) -> "DateTimeSetup":
        """Treat values without a time zone as UTC."""
        self.value_parser.assume_utc = assume_utc
        return self


class UUIDSetup(ValueSetup):
    def format(self, format: str) -> "UUIDSetup":
        if format not in UUIDParser.formats:
            raise ValueError(
                f"Unsupported UUID format {format!r}. "
                f"Supported formats are: {', '.join(UUIDParser.formats)}"
            )
        self.value_parser.format = format
        return self


class EnumSetup(ValueSetup):
    def enum_value_help(self, member: Any, help: str) -> "EnumSetup":
        """Describe one member of the enum in the help text."""
        if not isinstance(member, self.value_parser.value_type):
            raise ValueError(
                f"{member!r} is not a member of {self.value_parser.value_type.__name__}."
            )
        self.value_parser.enum_value_helps[member] = help
        return self


class PathSetup(ValueSetup):
    def must_exist(self, must_exist: bool = True) -> "PathSetup":
        self.value_parser.must_exist = must_exist
        return self


# Looked up along the MRO of the value parser, so list parsers share the setup
# of their scalar parser.
_SETUP_TYPES: dict[type, Type[OptionSetup]] = {
    FlagParser: FlagSetup,
    IntParser: IntSetup,
    DateTimeParser: DateTimeSetup,
    UUIDParser: UUIDSetup,
    EnumParser: EnumSetup,
    PathParser: PathSetup,
    ValueParser: ValueSetup,
}


def register_setup(parser_type: Type[ValueParser], setup_type: Type[OptionSetup]) -> None:
    """Use ``setup_type`` for the options and arguments parsed by ``parser_type``."""
    _SETUP_TYPES[parser_type] = setup_type


def setup_for(command_parser: CommandParser, value_parser: ValueParser) -> OptionSetup:
    for klass in type(value_parser).__mro__:
        if klass in _SETUP_TYPES:
            return _SETUP_TYPES[klass](command_parser, value_parser)
    return OptionSetup(command_parser, value_parser)


class CommandSetup:
    """Settings shared by named and default commands."""

    def __init__(self, parser: "Parser", command_parser: CommandParser) -> None:
        self._parser = parser
        self.command_parser = command_parser

    def help(self, help: str) -> "CommandSetup":
        if help is None:
            raise TypeError("help() argument 'help' must not be None")
        self.command_parser.help = help
        return self

    def example_usage(self, example_usage: str) -> "CommandSetup":
        if example_usage is None:
            raise TypeError("example_usage() argument 'example_usage' must not be None")
        self.command_parser.example_usage = example_usage
        return self

    def validate(
        self, validator: Callable[[CommandValidatorContext], None]
    ) -> "CommandSetup":
        """Run ``validator`` after the options of this command have been bound."""
        if validator is None:
            raise TypeError("validate() argument 'validator' must not be None")
        self.command_parser.validator = validator
        return self

    def option(
        self, field: str, parser_type: Optional[Type[ValueParser]] = None
    ) -> Any:
        """
        Bind ``field`` of the options class to an option.

        Args:
            field: Attribute name on the options class.
            parser_type: The value parser to use; looked up from the field's
                annotation when omitted.

        Returns:
            The setup object for the option. Calling ``option`` again for the
            same field configures the same option.
        """
        return self._value(field, parser_type, Role.OPTION)

    def argument(
        self, field: str, parser_type: Optional[Type[ValueParser]] = None
    ) -> Any:
        """Bind ``field`` of the options class to an argument."""
        return self._value(field, parser_type, Role.ARGUMENT)

    def _value(
        self, field: str, parser_type: Optional[Type[ValueParser]], role: Role
    ) -> OptionSetup:
        if field is None:
            raise TypeError(f"{role.value}() argument 'field' must not be None")
        value_parser = self.command_parser.get_or_create_value_parser(field, parser_type, role)
        return setup_for(self.command_parser, value_parser)


class NamedCommandSetup(CommandSetup):
    def name(self, name: str) -> "NamedCommandSetup":
        """
        Set the name that selects this command on the command line.

        Raises:
            ValueError: If the name is invalid or used by another command.
        """
        _check_command_name(name)
        for other in self._parser.command_parsers:
            if other is not self.command_parser and not other.is_default and other.name == name:
                raise ValueError(f"The command name '{name}' is already used.")
        self.command_parser.name = name
        return self


class DefaultCommandSetup(CommandSetup):
    pass


def _check_command_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ValueError("Command name must be a non-empty string.")
    if name.startswith("-") or name.startswith("\\"):
        raise ValueError(f"Command name '{name}' must not start with '{name[0]}'.")
    if any(char.isspace() for char in name):
        raise ValueError(f"Command name '{name}' must not contain whitespace.")
    if name == "help":
        raise ValueError("The command name 'help' is reserved.")


class ParserSetup:
    """Configures a Parser; available as ``parser.setup``."""

    def __init__(self, parser: "Parser") -> None:
        self._parser = parser

    def program_name(self, program_name: str) -> "ParserSetup":
        if program_name is None:
            raise TypeError("program_name() argument 'program_name' must not be None")
        self._parser.program_name = program_name
        return self

    def banner(self, banner: str) -> "ParserSetup":
        """Text printed above help and error texts, e.g. the program name and version."""
        if banner is None:
            raise TypeError("banner() argument 'banner' must not be None")
        self._parser.banner = banner
        return self

    def help_text_max_line_length(self, max_line_length: int) -> "ParserSetup":
        if max_line_length <= 0:
            raise ValueError("Maximum line length must be greater than zero.")
        self._parser.help_text_max_line_length = max_line_length
        return self

    def help_text_writer(self, writer: Optional[TextIO]) -> "ParserSetup":
        """Stream help texts are printed to; None disables printing."""
        self._parser.help_text_writer = writer
        return self

    def error_text_writer(self, writer: Optional[TextIO]) -> "ParserSetup":
        """Stream error texts are printed to; None disables printing."""
        self._parser.error_text_writer = writer
        return self

    def ignore_unknown_options(self, ignore: bool = True) -> "ParserSetup":
        self._parser.ignore_unknown_options = ignore
        return self

    def config_file(self, config_path: Union[str, os.PathLike]) -> "ParserSetup":
        """
        Load default values from a YAML or JSON file.

        The file maps command names to option values; the section of the
        default command is called ``default``:

            date:
              offset: "1.00:00"
              utc: true

        Values from the file are used for options that are not given on the
        command line and are converted like command line values.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValueError: If the file format is not supported or invalid.
        """
        config = load_config_file(config_path)
        logger.debug("Loaded config sections {} from {}", list(config), config_path)
        self._parser.config = config
        return self

    def command(self, options_type: Type[Any]) -> NamedCommandSetup:
        """
        Declare a named command whose options are bound to ``options_type``.

        The command name defaults to the class name without an ``Options``,
        ``Arguments`` or ``Args`` suffix, in lower case with dashes:
        ``FileReplaceOptions`` -> ``file-replace``.
        """
        command_parser = self._find(options_type, is_default=False)
        if command_parser is None:
            command_parser = CommandParser(options_type)
            setup = NamedCommandSetup(self._parser, command_parser)
            setup.name(default_command_name(options_type))
            self._parser.command_parsers.append(command_parser)
            return setup
        return NamedCommandSetup(self._parser, command_parser)

    def default_command(self, options_type: Type[Any]) -> DefaultCommandSetup:
        """
        Declare the command that is used when no command name is given.

        Raises:
            ValueError: If another default command is already declared.
        """
        command_parser = self._find(options_type, is_default=True)
        if command_parser is None:
            if self._parser.default_command_parser is not None:
                raise ValueError("A default command is already declared.")
            command_parser = CommandParser(options_type, is_default=True)
            self._parser.command_parsers.append(command_parser)
        return DefaultCommandSetup(self._parser, command_parser)

    def _find(self, options_type: Type[Any], is_default: bool) -> Optional[CommandParser]:
        if options_type is None:
            raise TypeError("options_type must not be None")
        for command_parser in self._parser.command_parsers:
            if command_parser.options_type is options_type:
                if command_parser.is_default is not is_default:
                    kind = "the default command" if command_parser.is_default else "a named command"
                    raise ValueError(f"{options_type.__name__} is already used by {kind}.")
                return command_parser
        return None
