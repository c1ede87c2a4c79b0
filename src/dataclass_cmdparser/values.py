"""
Value parsers.

A value parser owns one field of a command's options class. During a parse it
finds the option tokens that carry its name, converts their raw string values
and writes the result into the options instance. Problems with the input are
recorded as errors on the ParseResult; nothing in here raises for bad user
input.

The hierarchy:

- FlagParser: valueless switch, sets the field to True when present.
- SingleValueParser: exactly one value, converted by ``try_parse``.
- MultiValueParser: one or more values, each converted by ``try_parse``.

A new scalar type only needs a SingleValueParser subclass that implements
``try_parse(raw) -> Result``; ``multi_value()`` derives the list form from it.
"""

import copy
import dataclasses
import enum
import functools
import operator
import re
import types
import typing
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path, PurePath
from typing import Any, Callable, Literal, Optional, Type, Union

from result import Err, Ok, Result

from .errors import (
    DuplicateError,
    InvalidError,
    MissingError,
    MultipleValuesError,
    ValueFormatError,
    ValueMissingError,
)
from .names import Name, Role
from .results import ParseResult
from .tokens import OptionToken, Token

# Marks a parser without a configured default value.
UNSET: Any = dataclasses.MISSING


class ValueKind(enum.Enum):
    VALUELESS = "valueless"
    SINGLE_VALUE = "single_value"
    MULTI_VALUE = "multi_value"


@dataclasses.dataclass(frozen=True)
class FieldBinding:
    """Read and write access to one named slot of an options instance."""

    name: str
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]

    @classmethod
    def for_attribute(cls, attribute: str) -> "FieldBinding":
        def setter(instance: Any, value: Any) -> None:
            setattr(instance, attribute, value)

        return cls(attribute, operator.attrgetter(attribute), setter)

    def get(self, instance: Any) -> Any:
        return self.getter(instance)

    def set(self, instance: Any, value: Any) -> None:
        self.setter(instance, value)


def default_name_for(field_name: str) -> str:
    """Derive the command line name of a field: ``display_in_utc`` -> ``display-in-utc``."""
    return field_name.strip("_").replace("_", "-")


class ValueParser:
    """Base class of all value parsers."""

    value_kind: ValueKind = ValueKind.VALUELESS

    def __init__(
        self,
        binding: FieldBinding,
        name: Optional[Name] = None,
        value_type: Any = None,
        role: Role = Role.OPTION,
    ) -> None:
        if binding is None:
            raise TypeError("ValueParser() argument 'binding' must not be None")
        self.binding = binding
        self.name = name if name is not None else Name(default_name_for(binding.name))
        self.value_type = value_type
        self.role = role
        self.help = ""
        self.default: Any = UNSET
        self._required = False

    @property
    def is_required(self) -> bool:
        return self._required

    @is_required.setter
    def is_required(self, value: bool) -> None:
        self._required = value

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    def get_help_text(self) -> str:
        return self.help

    def parse(self, tokens: list[Token], result: ParseResult) -> None:
        raise NotImplementedError

    def _claim_token(
        self, tokens: list[Token], result: ParseResult
    ) -> Optional[OptionToken]:
        """
        Mark every token carrying this parser's name as consumed and return the first.

        Each further occurrence is reported as a DuplicateError; its values are
        discarded.
        """
        matching = [
            token
            for token in tokens
            if isinstance(token, OptionToken) and self.name.matches(token.name)
        ]
        for token in matching:
            token.consumed = True
        for _ in matching[1:]:
            result.add_error(DuplicateError(self.name, self.role))
        return matching[0] if matching else None

    def _bind(self, result: ParseResult, value: Any) -> None:
        self.binding.set(result.options, value)

    def _bind_absent(self, result: ParseResult) -> None:
        if self.is_required:
            result.add_error(MissingError(self.name, self.role))
        elif self.has_default:
            self._bind(result, copy.copy(self.default))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(field={self.binding.name!r}, name={self.name!r})"


class FlagParser(ValueParser):
    """A switch without values; present means True."""

    value_kind = ValueKind.VALUELESS

    @property
    def is_required(self) -> bool:
        return False

    @is_required.setter
    def is_required(self, value: bool) -> None:
        if value:
            raise ValueError(f"The {self.role.value} {self.name} is a flag and cannot be required.")

    def parse(self, tokens: list[Token], result: ParseResult) -> None:
        token = self._claim_token(tokens, result)
        if token is None:
            self._bind_absent(result)
        elif token.values:
            result.add_error(
                InvalidError(
                    self.name,
                    self.role,
                    f"This {self.role.value} does not support any values.",
                )
            )
        else:
            self._bind(result, True)


class SingleValueParser(ValueParser):
    """Base class for parsers that take exactly one value."""

    value_kind = ValueKind.SINGLE_VALUE

    def try_parse(self, raw: str) -> Result[Any, str]:
        """
        Convert one raw value.

        Returns:
            Result[Any, str]: ``Ok(value)``, or ``Err(expected_format)`` describing
            what a valid value looks like.
        """
        raise NotImplementedError

    def _convert(self, raw: str, result: ParseResult) -> Result[Any, str]:
        converted = self.try_parse(raw)
        if isinstance(converted, Err):
            result.add_error(
                ValueFormatError(self.name, self.role, raw, converted.err_value)
            )
        return converted

    def parse(self, tokens: list[Token], result: ParseResult) -> None:
        token = self._claim_token(tokens, result)
        if token is None:
            self._bind_absent(result)
        elif not token.values:
            result.add_error(ValueMissingError(self.name, self.role))
        elif len(token.values) > 1:
            result.add_error(MultipleValuesError(self.name, self.role))
        else:
            converted = self._convert(token.values[0], result)
            if isinstance(converted, Ok):
                self._bind(result, converted.ok_value)


class MultiValueParser(ValueParser):
    """
    Base class for parsers that take one or more values.

    Used as the first base next to a SingleValueParser subclass, which supplies
    ``try_parse``; see ``multi_value()``.
    """

    value_kind = ValueKind.MULTI_VALUE

    def parse(self, tokens: list[Token], result: ParseResult) -> None:
        token = self._claim_token(tokens, result)
        if token is None:
            self._bind_absent(result)
            return
        if not token.values:
            result.add_error(ValueMissingError(self.name, self.role))
            return

        values = []
        for raw in token.values:
            converted = self.try_parse(raw)
            if isinstance(converted, Ok):
                values.append(converted.ok_value)
            else:
                result.add_error(
                    ValueFormatError(self.name, self.role, raw, converted.err_value)
                )
        self._bind(result, values)


@functools.cache
def multi_value(parser_type: Type[SingleValueParser]) -> Type[MultiValueParser]:
    """
    Derive the list form of a single value parser.

    The derived class converts every value with the ``try_parse`` and the
    settings of ``parser_type`` and binds a list. Repeated calls return the same
    class.
    """
    if not (isinstance(parser_type, type) and issubclass(parser_type, SingleValueParser)):
        raise TypeError(
            f"multi_value() expects a SingleValueParser subclass, got {parser_type!r}"
        )
    base_name = parser_type.__name__
    if base_name.endswith("Parser"):
        base_name = base_name[: -len("Parser")]
    return typing.cast(
        Type[MultiValueParser],
        type(
            f"{base_name}ListParser",
            (MultiValueParser, parser_type),
            {"__module__": parser_type.__module__},
        ),
    )


class StringParser(SingleValueParser):
    def try_parse(self, raw: str) -> Result[str, str]:
        return Ok(raw)


_GROUPED_INTEGER = re.compile(r"[+-]?\d{1,3}(,\d{3})+")


class IntParser(SingleValueParser):
    """Integers, optionally with ``_`` or ``,`` digit grouping and a permitted range."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.minimum: Optional[int] = None
        self.maximum: Optional[int] = None

    @property
    def expected_format(self) -> str:
        if self.minimum is not None and self.maximum is not None:
            return f"An integer in the range from {self.minimum} to {self.maximum}"
        if self.minimum is not None:
            return f"An integer greater than or equal to {self.minimum}"
        if self.maximum is not None:
            return f"An integer less than or equal to {self.maximum}"
        return "An integer"

    def try_parse(self, raw: str) -> Result[int, str]:
        text = raw.strip()
        if _GROUPED_INTEGER.fullmatch(text):
            text = text.replace(",", "")
        try:
            value = int(text, 10)
        except ValueError:
            return Err(self.expected_format)
        if (self.minimum is not None and value < self.minimum) or (
            self.maximum is not None and value > self.maximum
        ):
            return Err(self.expected_format)
        return Ok(value)


class FloatParser(SingleValueParser):
    def try_parse(self, raw: str) -> Result[float, str]:
        try:
            return Ok(float(raw))
        except ValueError:
            return Err("A floating point number")


class DecimalParser(SingleValueParser):
    def try_parse(self, raw: str) -> Result[Decimal, str]:
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            return Err("A decimal number")
        if not value.is_finite():
            return Err("A decimal number")
        return Ok(value)


class DateTimeParser(SingleValueParser):
    """
    Dates and times.

    Without a format, ISO 8601 text is accepted (``2024-01-31``,
    ``2024-01-31T13:45:00``, ``2024-01-31 13:45:00+02:00``). With a format, the
    value must match it exactly (``datetime.strptime`` directives). When
    ``assume_utc`` is set, values without a time zone are taken as UTC.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.format: Optional[str] = None
        self.assume_utc = False

    @property
    def expected_format(self) -> str:
        if self.format:
            return f"A date and time in the format {self.format}"
        return "A valid date and time (ISO 8601, for example 2024-01-31T13:45:00)"

    def try_parse(self, raw: str) -> Result[datetime, str]:
        try:
            if self.format:
                value = datetime.strptime(raw, self.format)
            else:
                value = datetime.fromisoformat(raw.strip())
        except ValueError:
            return Err(self.expected_format)
        if self.assume_utc and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return Ok(value)


_TIME_SPAN = re.compile(
    r"(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?"
)
_DAYS_ONLY = re.compile(r"(?P<sign>-)?(?P<days>\d+)")


class TimeDeltaParser(SingleValueParser):
    """
    Durations written as ``[-][d.]hh:mm[:ss[.fffffff]]`` or as a whole number of days.
    """

    expected_format = "A valid time span ([-][d.]hh:mm[:ss[.fffffff]])"

    def try_parse(self, raw: str) -> Result[timedelta, str]:
        text = raw.strip()

        days_only = _DAYS_ONLY.fullmatch(text)
        if days_only:
            value = timedelta(days=int(days_only["days"]))
            return Ok(-value if days_only["sign"] else value)

        match = _TIME_SPAN.fullmatch(text)
        if match is None:
            return Err(self.expected_format)

        hours = int(match["hours"])
        minutes = int(match["minutes"])
        seconds = int(match["seconds"] or 0)
        if hours > 23 or minutes > 59 or seconds > 59:
            return Err(self.expected_format)

        # Seven fraction digits are 100ns ticks; timedelta resolves microseconds.
        microseconds = int((match["fraction"] or "0").ljust(7, "0")) // 10
        value = timedelta(
            days=int(match["days"] or 0),
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            microseconds=microseconds,
        )
        return Ok(-value if match["sign"] else value)


_UUID_FORMATS = {
    "N": re.compile(r"[0-9a-fA-F]{32}"),
    "D": re.compile(r"[0-9a-fA-F]{8}(-[0-9a-fA-F]{4}){3}-[0-9a-fA-F]{12}"),
    "B": re.compile(r"\{[0-9a-fA-F]{8}(-[0-9a-fA-F]{4}){3}-[0-9a-fA-F]{12}\}"),
    "P": re.compile(r"\([0-9a-fA-F]{8}(-[0-9a-fA-F]{4}){3}-[0-9a-fA-F]{12}\)"),
}


class UUIDParser(SingleValueParser):
    """
    UUIDs. An optional format restricts the accepted notation:
    ``N`` (32 digits), ``D`` (hyphenated), ``B`` (in braces), ``P`` (in parentheses).
    """

    formats = tuple(_UUID_FORMATS)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.format: Optional[str] = None

    @property
    def expected_format(self) -> str:
        if self.format:
            return f"A UUID in the format {self.format}"
        return "A valid UUID"

    def try_parse(self, raw: str) -> Result[uuid.UUID, str]:
        text = raw.strip()
        if self.format and not _UUID_FORMATS[self.format].fullmatch(text):
            return Err(self.expected_format)
        try:
            return Ok(uuid.UUID(text))
        except ValueError:
            return Err(self.expected_format)


class EnumParser(SingleValueParser):
    """
    Members of an Enum, matched by name without regard to case.

    The help text lists the possible values, together with the per-member help
    registered in ``enum_value_helps``.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        if not (isinstance(self.value_type, type) and issubclass(self.value_type, enum.Enum)):
            raise TypeError(
                f"{type(self).__name__} requires an Enum type, got {self.value_type!r}"
            )
        self.enum_value_helps: dict[enum.Enum, str] = {}

    def get_help_text(self) -> str:
        if self.enum_value_helps:
            names = ", ".join(member.name for member in self.enum_value_helps)
            lines = [f"{self.help} Possible values: {names}.".lstrip()]
            lines.extend(
                f"{member.name}: {help}" for member, help in self.enum_value_helps.items()
            )
            return "\n".join(lines)
        names = ", ".join(member.name for member in self.value_type)
        return f"{self.help} Possible values: {names}.".lstrip()

    def try_parse(self, raw: str) -> Result[enum.Enum, str]:
        text = raw.strip()
        for member in self.value_type:
            if member.name.lower() == text.lower():
                return Ok(member)
        for member in self.value_type:
            if str(member.value) == text:
                return Ok(member)
        return Err("One of the valid options (see help)")


class ChoiceParser(SingleValueParser):
    """One of a fixed set of values, as declared by a ``Literal[...]`` annotation."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.value_type = tuple(self.value_type or ())
        if not self.value_type:
            raise TypeError(f"{type(self).__name__} requires at least one choice")

    def get_help_text(self) -> str:
        choices = ", ".join(str(choice) for choice in self.value_type)
        return f"{self.help} Possible values: {choices}.".lstrip()

    def try_parse(self, raw: str) -> Result[Any, str]:
        for choice in self.value_type:
            if str(choice) == raw:
                return Ok(choice)
        return Err("One of: " + ", ".join(str(choice) for choice in self.value_type))


class PathParser(SingleValueParser):
    """File system paths, optionally required to exist."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.must_exist = False

    def try_parse(self, raw: str) -> Result[Path, str]:
        if not raw.strip():
            return Err("A file system path")
        path = Path(raw)
        if self.must_exist and not path.exists():
            return Err("The path of an existing file or directory")
        return Ok(path)


StringListParser = multi_value(StringParser)
IntListParser = multi_value(IntParser)
FloatListParser = multi_value(FloatParser)
DecimalListParser = multi_value(DecimalParser)
DateTimeListParser = multi_value(DateTimeParser)
TimeDeltaListParser = multi_value(TimeDeltaParser)
UUIDListParser = multi_value(UUIDParser)
EnumListParser = multi_value(EnumParser)
ChoiceListParser = multi_value(ChoiceParser)
PathListParser = multi_value(PathParser)


_TYPE_PARSERS: dict[type, Type[ValueParser]] = {
    bool: FlagParser,
    str: StringParser,
    int: IntParser,
    float: FloatParser,
    Decimal: DecimalParser,
    datetime: DateTimeParser,
    timedelta: TimeDeltaParser,
    uuid.UUID: UUIDParser,
    PurePath: PathParser,
}


def register_parser(value_type: type, parser_type: Type[ValueParser]) -> None:
    """
    Make ``parser_type`` the parser for fields annotated with ``value_type``.

    Registering a SingleValueParser also covers ``list[value_type]`` fields.
    """
    if not (isinstance(parser_type, type) and issubclass(parser_type, ValueParser)):
        raise TypeError(f"register_parser() expects a ValueParser subclass, got {parser_type!r}")
    _TYPE_PARSERS[value_type] = parser_type


def _get_optional_inner_type(type_hint: Any) -> Optional[Any]:
    """
    If type_hint is Optional[T] (i.e., Union[T, None] or T | None), return T.
    Otherwise, return None.
    """
    origin = typing.get_origin(type_hint)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(type_hint)
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and type(None) in args:
            return non_none_args[0]
    return None


def _scalar_parser_for(type_hint: Any) -> tuple[Type[ValueParser], Any]:
    if typing.get_origin(type_hint) is Literal:
        return ChoiceParser, typing.get_args(type_hint)

    if isinstance(type_hint, type) and typing.get_origin(type_hint) is None:
        if issubclass(type_hint, enum.Enum):
            return EnumParser, type_hint
        if type_hint in _TYPE_PARSERS:
            return _TYPE_PARSERS[type_hint], type_hint
        for registered, parser_type in _TYPE_PARSERS.items():
            if registered is not bool and issubclass(type_hint, registered):
                return parser_type, type_hint

    raise TypeError(
        f"No value parser is registered for the type {type_hint!r}. "
        "Pass a parser class explicitly or register one with register_parser()."
    )


def parser_for_type(type_hint: Any) -> tuple[Type[ValueParser], Any]:
    """
    Find the value parser class for a field annotation.

    Args:
        type_hint: The annotation, e.g. ``int``, ``Optional[datetime]``,
            ``list[Color]`` or ``Literal["fast", "slow"]``.

    Returns:
        tuple: The parser class and the value type to construct it with.

    Raises:
        TypeError: If no parser is registered for the annotation.
    """
    inner_type = _get_optional_inner_type(type_hint)
    if inner_type is not None:
        type_hint = inner_type

    if typing.get_origin(type_hint) in (list, typing.List):
        args = typing.get_args(type_hint)
        element_type = args[0] if args else str
        parser_type, value_type = _scalar_parser_for(element_type)
        if not issubclass(parser_type, SingleValueParser):
            raise TypeError(f"Lists of {element_type!r} are not supported.")
        return multi_value(parser_type), value_type

    return _scalar_parser_for(type_hint)
