"""
Command parsers.

A CommandParser owns one command: the options class its values are bound to,
the value parsers for the bound fields, the help texts and an optional
validator. During a parse it decides whether the token stream selects its
command and, if so, creates the options instance and lets every value parser
bind its field.
"""

import dataclasses
import re
import typing
from typing import Any, Callable, Mapping, Optional, Type

from loguru import logger

from .errors import ParseError
from .names import Name, Role
from .results import ParseResult
from .tokens import CommandToken, OptionToken, Token
from .values import FieldBinding, ValueKind, ValueParser, default_name_for, parser_for_type

_COMMAND_SUFFIXES = ("Options", "Arguments", "Args")


class UnmappedFieldError(LookupError):
    """Raised when a validator asks for the name of a field that was never bound."""


def default_command_name(options_type: Type[Any]) -> str:
    """
    Derive a command name from an options class name.

    ``FileReplaceOptions`` -> ``file-replace``, ``DateArgs`` -> ``date``.
    """
    name = options_type.__name__
    for suffix in _COMMAND_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            name = name[: -len(suffix)]
            break
    words = re.findall(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+", name)
    return "-".join(word.lower() for word in words) or name.lower()


def check_options_type(options_type: Type[Any]) -> None:
    """
    Check that a fresh instance of ``options_type`` can be created for every parse.

    Raises:
        TypeError: If ``options_type`` is not a class, or is a dataclass with a
            field that has no default value.
    """
    if not isinstance(options_type, type):
        raise TypeError(f"Options type must be a class, got {options_type!r}")
    if dataclasses.is_dataclass(options_type):
        for field in dataclasses.fields(options_type):
            if (
                field.init
                and field.default is dataclasses.MISSING
                and field.default_factory is dataclasses.MISSING
            ):
                raise TypeError(
                    f"Field '{field.name}' of {options_type.__name__} has no default value. "
                    "All fields of an options class must have defaults."
                )


class CommandParser:
    """Parses the options of one command into an instance of its options class."""

    def __init__(
        self, options_type: Type[Any], name: str = "", is_default: bool = False
    ) -> None:
        check_options_type(options_type)
        self.options_type = options_type
        self.name = name
        self.is_default = is_default
        self.help = ""
        self.example_usage = ""
        self.validator: Optional[Callable[["CommandValidatorContext"], None]] = None
        self.value_parsers: list[ValueParser] = []

    def matches(self, tokens: list[Token]) -> bool:
        """
        Return True if the leading command token names this command, or there is
        no command token and this is the default command.
        """
        command_token = _first_command_token(tokens)
        if command_token is None:
            return self.is_default
        return not self.is_default and command_token.name == self.name

    def parse(
        self,
        tokens: list[Token],
        result: ParseResult,
        config: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Bind the tokens to a fresh options instance if this command is selected.

        Values in ``config`` are used for options absent from ``tokens``.

        Returns:
            bool: True if the command matched.
        """
        if not self.matches(tokens):
            return False

        command_token = _first_command_token(tokens)
        if command_token is not None:
            command_token.consumed = True

        logger.debug("Command '{}' matched, binding {}", self.name, self.options_type.__name__)
        result.options = self.options_type()
        result.command_name = self.name

        if config:
            self._add_config_tokens(tokens, config)
        for value_parser in self.value_parsers:
            value_parser.parse(tokens, result)
        return True

    def validate(self, tokens: list[Token], result: ParseResult) -> None:
        """Run the validator, if one is configured and this command is selected."""
        if self.validator is None or not self.matches(tokens):
            return
        self.validator(CommandValidatorContext(self, result))

    def get_or_create_value_parser(
        self,
        field: str,
        parser_type: Optional[Type[ValueParser]] = None,
        role: Role = Role.OPTION,
    ) -> ValueParser:
        """
        Return the value parser bound to ``field``, creating it on first use.

        Args:
            field: Attribute name on the options class.
            parser_type: The parser class to use. When omitted it is looked up
                from the field's annotation.
            role: Whether the field is presented as an option or an argument.

        Returns:
            ValueParser: The same instance on every call for the same field.

        Raises:
            ValueError: If the field is already bound with a different role or
                parser class, or its default name is already taken.
            TypeError: If no parser class is given and none is registered for
                the field's annotation.
        """
        existing = self.find_value_parser(field)
        if existing is not None:
            if existing.role is not role:
                raise ValueError(
                    f"Field '{field}' is already bound as an {existing.role.value}."
                )
            if parser_type is not None and not isinstance(existing, parser_type):
                raise ValueError(
                    f"Field '{field}' is already bound to {type(existing).__name__}."
                )
            return existing

        type_hint = self._field_type(field)
        value_type = None
        if parser_type is None:
            parser_type, value_type = parser_for_type(type_hint)
        elif type_hint is not None:
            try:
                _, value_type = parser_for_type(type_hint)
            except TypeError:
                value_type = None

        name = Name(default_name_for(field))
        self.ensure_name_available(name)

        value_parser = parser_type(
            FieldBinding.for_attribute(field), name, value_type=value_type, role=role
        )
        value_parser.help = self._field_help(field)
        self.value_parsers.append(value_parser)
        return value_parser

    def find_value_parser(self, field: str) -> Optional[ValueParser]:
        for value_parser in self.value_parsers:
            if value_parser.binding.name == field:
                return value_parser
        return None

    def ensure_name_available(
        self, name: Name, exclude: Optional[ValueParser] = None
    ) -> None:
        """
        Raise ValueError if the long or short form of ``name`` is used by another
        value parser of this command.
        """
        for value_parser in self.value_parsers:
            if value_parser is exclude:
                continue
            other = value_parser.name
            if other.name == name.name:
                raise ValueError(
                    f"The name '{name.name}' is already used by the field "
                    f"'{value_parser.binding.name}' of the command '{self.name}'."
                )
            if name.short_name is not None and other.short_name == name.short_name:
                raise ValueError(
                    f"The short name '{name.short_name}' is already used by the field "
                    f"'{value_parser.binding.name}' of the command '{self.name}'."
                )

    def rename(self, value_parser: ValueParser, name: Name) -> None:
        self.ensure_name_available(name, exclude=value_parser)
        value_parser.name = name

    def _field_type(self, field: str) -> Any:
        try:
            hints = typing.get_type_hints(self.options_type)
        except NameError:
            hints = dict(getattr(self.options_type, "__annotations__", {}))
        if field in hints:
            return hints[field]
        if hasattr(self.options_type, field) or hasattr(self.options_type(), field):
            return None
        raise ValueError(f"{self.options_type.__name__} has no field named '{field}'.")

    def _field_help(self, field: str) -> str:
        if dataclasses.is_dataclass(self.options_type):
            for dataclass_field in dataclasses.fields(self.options_type):
                if dataclass_field.name == field:
                    return str(dataclass_field.metadata.get("help", ""))
        return ""

    def _add_config_tokens(self, tokens: list[Token], config: Mapping[str, Any]) -> None:
        """
        Add option tokens for config file values whose option was not given on the
        command line.
        """
        for key in config:
            if not any(
                value_parser.name.name == key or value_parser.binding.name == key
                for value_parser in self.value_parsers
            ):
                logger.warning(
                    "Config value '{}' does not match any option of the command '{}'",
                    key,
                    self.name,
                )

        for value_parser in self.value_parsers:
            key = value_parser.name.name
            if key not in config:
                key = value_parser.binding.name
                if key not in config:
                    continue
            if any(
                isinstance(token, OptionToken) and value_parser.name.matches(token.name)
                for token in tokens
            ):
                continue
            values = _config_values(config[key], value_parser.value_kind)
            if values is None:
                continue
            logger.debug("Using config value for '{}': {}", value_parser.name.name, values)
            tokens.append(OptionToken(value_parser.name.name, values))

    def __repr__(self) -> str:
        return (
            f"CommandParser(options_type={self.options_type.__name__}, "
            f"name={self.name!r}, is_default={self.is_default})"
        )


def _first_command_token(tokens: list[Token]) -> Optional[CommandToken]:
    return next((token for token in tokens if isinstance(token, CommandToken)), None)


def _config_values(value: Any, value_kind: ValueKind) -> Optional[list[str]]:
    """Convert a config file value into raw token values; None means "not given"."""
    if value is None or value is False:
        return None
    if value is True:
        return [] if value_kind is ValueKind.VALUELESS else ["True"]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


class CommandValidatorContext:
    """
    What a command validator gets to see: the bound options, the parse result
    and a way to report problems.

    Example:
        def validate(context):
            if context.options.start > context.options.end:
                context.add_error(
                    InvalidOptionError(
                        context.get_option_name("start"), "Must not be after --end."
                    )
                )
    """

    def __init__(self, command_parser: CommandParser, parse_result: ParseResult) -> None:
        if command_parser is None:
            raise TypeError("CommandValidatorContext() argument 'command_parser' must not be None")
        if parse_result is None:
            raise TypeError("CommandValidatorContext() argument 'parse_result' must not be None")
        self._command_parser = command_parser
        self.parse_result = parse_result

    @property
    def options(self) -> Any:
        return self.parse_result.options

    def add_error(self, error: ParseError) -> None:
        if error is None:
            raise TypeError("add_error() argument 'error' must not be None")
        self.parse_result.add_error(error)

    def get_option_name(self, field: str) -> Name:
        """
        Return the Name of the option bound to ``field``.

        Raises:
            UnmappedFieldError: If no option is bound to the field.
        """
        return self._get_name(field, Role.OPTION)

    def get_argument_name(self, field: str) -> Name:
        """
        Return the Name of the argument bound to ``field``.

        Raises:
            UnmappedFieldError: If no argument is bound to the field.
        """
        return self._get_name(field, Role.ARGUMENT)

    def _get_name(self, field: str, role: Role) -> Name:
        value_parser = self._command_parser.find_value_parser(field)
        if value_parser is None or value_parser.role is not role:
            raise UnmappedFieldError(
                f"The field '{field}' of {self._command_parser.options_type.__name__} "
                f"is not mapped to an {role.value}."
            )
        return value_parser.name
