"""
Tests for the value parsers: binding, error reporting and type conversion.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path, PosixPath
from typing import Literal, Optional

import pytest
from result import Err, Ok

from dataclass_cmdparser import (
    ChoiceParser,
    DateTimeParser,
    DecimalParser,
    DuplicateError,
    EnumParser,
    FieldBinding,
    FlagParser,
    FloatParser,
    IntParser,
    InvalidError,
    MissingError,
    MultipleValuesError,
    MultiValueParser,
    Name,
    ParseResult,
    PathParser,
    Role,
    StringParser,
    TimeDeltaParser,
    UUIDParser,
    ValueFormatError,
    ValueKind,
    ValueMissingError,
    multi_value,
    parser_for_type,
    register_parser,
    tokenize,
)
from dataclass_cmdparser.values import IntListParser, StringListParser


class Color(Enum):
    RED = 1
    GREEN = 2


@dataclass
class ValueOptions:
    """Options instance the parsers under test bind to."""

    text: str = "unset"
    number: int = 0
    numbers: list[int] = field(default_factory=list)
    flag: bool = False
    color: Optional[Color] = None


def parse(value_parser, args):
    result = ParseResult()
    result.options = ValueOptions()
    tokens = list(tokenize(args))
    value_parser.parse(tokens, result)
    return result, tokens


def make(parser_type, field_name, value_type=None, **kwargs):
    return parser_type(FieldBinding.for_attribute(field_name), value_type=value_type, **kwargs)


class TestFieldBinding:
    """Test suite for FieldBinding."""

    def test_for_attribute(self):
        """Test reading and writing an attribute."""
        binding = FieldBinding.for_attribute("text")
        options = ValueOptions()
        binding.set(options, "hello")
        assert binding.get(options) == "hello"
        assert binding.name == "text"

    def test_custom_accessors(self):
        """Test a binding with explicit closures."""
        store = {}
        binding = FieldBinding("slot", store.get, lambda _, value: store.update(slot=value))
        binding.set(None, 5)
        assert store == {"slot": 5}

    def test_binding_required(self):
        """Test that a value parser needs a binding."""
        with pytest.raises(TypeError):
            StringParser(None)

    def test_default_name(self):
        """Test that the name is derived from the field name."""
        assert make(StringParser, "display_in_utc").name == Name("display-in-utc")


class TestBinding:
    """Test suite for the parse step shared by all value parsers."""

    def test_single_value(self):
        """Test binding a single value."""
        result, tokens = parse(make(StringParser, "text"), ["--text", "hello"])
        assert result.options.text == "hello"
        assert not result.has_errors
        assert tokens[0].consumed

    def test_short_name(self):
        """Test that the short form is matched."""
        value_parser = make(StringParser, "text", name=Name("text", "t"))
        result, _ = parse(value_parser, ["-t", "hello"])
        assert result.options.text == "hello"

    def test_absent_keeps_field_default(self):
        """Test that an absent optional option leaves the field alone."""
        result, _ = parse(make(StringParser, "text"), ["--other", "x"])
        assert result.options.text == "unset"
        assert not result.has_errors

    def test_absent_uses_configured_default(self):
        """Test that a configured default is written when absent."""
        value_parser = make(StringParser, "text")
        value_parser.default = "configured"
        result, _ = parse(value_parser, [])
        assert result.options.text == "configured"

    def test_list_default_is_copied(self):
        """Test that list defaults are not shared between parses."""
        value_parser = make(IntListParser, "numbers", int)
        value_parser.default = [1, 2]
        first, _ = parse(value_parser, [])
        first.options.numbers.append(3)
        second, _ = parse(value_parser, [])
        assert second.options.numbers == [1, 2]

    def test_required_missing(self):
        """Test that a missing required option gives exactly one MissingError."""
        value_parser = make(StringParser, "text")
        value_parser.is_required = True
        result, _ = parse(value_parser, ["--number", "1", "--flag"])
        assert result.errors == (MissingError(Name("text")),)
        assert result.errors[0].get_error_message() == "The option --text is required."

    def test_required_argument_wording(self):
        """Test that the role shows up in error messages."""
        value_parser = make(StringParser, "text", role=Role.ARGUMENT)
        value_parser.is_required = True
        result, _ = parse(value_parser, [])
        assert str(result.errors[0]) == "The argument --text is required."

    def test_duplicate_first_wins(self):
        """Test that a repeated option is reported and the first value is kept."""
        result, tokens = parse(make(IntParser, "number"), ["--number", "1", "--number", "2"])
        assert result.errors == (DuplicateError(Name("number")),)
        assert result.options.number == 1
        assert all(token.consumed for token in tokens)

    def test_duplicate_reported_per_extra_occurrence(self):
        """Test one DuplicateError per repetition."""
        result, _ = parse(make(FlagParser, "flag"), ["--flag", "--flag", "--flag"])
        assert len([e for e in result.errors if isinstance(e, DuplicateError)]) == 2

    def test_multiple_values(self):
        """Test that a single value option rejects several values."""
        result, _ = parse(make(IntParser, "number"), ["--number", "1", "2"])
        assert result.errors == (MultipleValuesError(Name("number")),)
        assert result.options.number == 0

    def test_value_missing(self):
        """Test that a value option needs a value."""
        result, _ = parse(make(IntParser, "number"), ["--number"])
        assert result.errors == (ValueMissingError(Name("number")),)

    def test_value_format(self):
        """Test that a conversion failure names the value and the expected format."""
        result, _ = parse(make(IntParser, "number"), ["--number", "abc"])
        assert result.errors == (ValueFormatError(Name("number"), Role.OPTION, "abc", "An integer"),)
        assert result.errors[0].get_error_message() == (
            "The value 'abc' of the option --number has an invalid format. "
            "The expected format is: An integer."
        )
        assert result.options.number == 0


class TestFlagParser:
    """Test suite for FlagParser."""

    def test_present(self):
        """Test that a present flag is True."""
        result, _ = parse(make(FlagParser, "flag"), ["--flag"])
        assert result.options.flag is True

    def test_absent(self):
        """Test that an absent flag keeps its field default."""
        result, _ = parse(make(FlagParser, "flag"), [])
        assert result.options.flag is False

    def test_values_rejected(self):
        """Test that a flag does not accept values."""
        result, _ = parse(make(FlagParser, "flag"), ["--flag", "yes"])
        assert result.errors == (
            InvalidError(Name("flag"), Role.OPTION, "This option does not support any values."),
        )
        assert str(result.errors[0]) == (
            "The option --flag is invalid: This option does not support any values."
        )

    def test_cannot_be_required(self):
        """Test that flags are always optional."""
        value_parser = make(FlagParser, "flag")
        with pytest.raises(ValueError):
            value_parser.is_required = True
        assert value_parser.is_required is False
        assert value_parser.value_kind is ValueKind.VALUELESS


class TestMultiValueParser:
    """Test suite for list parsers."""

    def test_values(self):
        """Test binding several values."""
        result, _ = parse(make(IntListParser, "numbers", int), ["--numbers", "1", "2", "3"])
        assert result.options.numbers == [1, 2, 3]

    def test_each_bad_value_reported(self):
        """Test one format error per invalid value; valid values are kept."""
        result, _ = parse(make(IntListParser, "numbers", int), ["--numbers", "1", "x", "y"])
        assert [error.value for error in result.errors] == ["x", "y"]
        assert result.options.numbers == [1]

    def test_value_missing(self):
        """Test that a list option needs at least one value."""
        result, _ = parse(make(StringListParser, "numbers"), ["--numbers"])
        assert result.errors == (ValueMissingError(Name("numbers")),)

    def test_derived_classes(self):
        """Test the derivation of list parsers."""
        assert multi_value(IntParser) is IntListParser
        assert IntListParser.__name__ == "IntListParser"
        assert issubclass(IntListParser, MultiValueParser)
        assert issubclass(IntListParser, IntParser)
        assert IntListParser.value_kind is ValueKind.MULTI_VALUE

    def test_derived_classes_convert_with_scalar_parser(self):
        """Test that derived list parsers convert with the scalar try_parse."""
        assert IntListParser.try_parse is IntParser.try_parse
        assert IntListParser.parse is MultiValueParser.parse
        assert multi_value(EnumParser).try_parse is EnumParser.try_parse

    def test_derived_parser_keeps_settings(self):
        """Test that the list form uses the scalar parser's settings."""
        value_parser = make(IntListParser, "numbers", int)
        value_parser.minimum = 0
        result, _ = parse(value_parser, ["--numbers", "1", "\\-1"])
        assert result.errors[0].value == "-1"

    def test_multi_value_requires_single_value_parser(self):
        """Test that only single value parsers can be derived."""
        with pytest.raises(TypeError):
            multi_value(FlagParser)


class TestConversions:
    """Test suite for the built-in try_parse implementations."""

    def test_string(self):
        assert make(StringParser, "text").try_parse(" a b ") == Ok(" a b ")

    @pytest.mark.parametrize(
        "raw, expected", [("42", 42), ("-7", -7), ("1_000", 1000), ("1,000,000", 1000000), (" 5 ", 5)]
    )
    def test_int(self, raw, expected):
        assert make(IntParser, "number").try_parse(raw) == Ok(expected)

    @pytest.mark.parametrize("raw", ["abc", "1.5", "1,00", ""])
    def test_int_invalid(self, raw):
        assert make(IntParser, "number").try_parse(raw) == Err("An integer")

    def test_int_range(self):
        value_parser = make(IntParser, "number")
        value_parser.minimum = 1
        value_parser.maximum = 10
        assert value_parser.try_parse("10") == Ok(10)
        assert value_parser.try_parse("11") == Err("An integer in the range from 1 to 10")

    def test_float(self):
        value_parser = make(FloatParser, "number")
        assert value_parser.try_parse("2.5") == Ok(2.5)
        assert value_parser.try_parse("two") == Err("A floating point number")

    def test_decimal(self):
        value_parser = make(DecimalParser, "number")
        assert value_parser.try_parse("0.10") == Ok(Decimal("0.10"))
        assert value_parser.try_parse("NaN") == Err("A decimal number")
        assert value_parser.try_parse("1,5") == Err("A decimal number")

    def test_datetime_iso(self):
        value_parser = make(DateTimeParser, "text")
        assert value_parser.try_parse("2024-01-31") == Ok(datetime(2024, 1, 31))
        assert value_parser.try_parse("2024-01-31T13:45:00") == Ok(datetime(2024, 1, 31, 13, 45))
        assert value_parser.try_parse("31.01.2024").is_err()

    def test_datetime_format(self):
        value_parser = make(DateTimeParser, "text")
        value_parser.format = "%d.%m.%Y"
        assert value_parser.try_parse("31.01.2024") == Ok(datetime(2024, 1, 31))
        assert value_parser.try_parse("2024-01-31") == Err("A date and time in the format %d.%m.%Y")

    def test_datetime_assume_utc(self):
        value_parser = make(DateTimeParser, "text")
        value_parser.assume_utc = True
        parsed = value_parser.try_parse("2024-01-31T12:00:00").ok_value
        assert parsed.tzinfo is timezone.utc

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("02:30", timedelta(hours=2, minutes=30)),
            ("1.02:03:04", timedelta(days=1, hours=2, minutes=3, seconds=4)),
            ("00:00:01.5", timedelta(seconds=1, microseconds=500000)),
            ("3", timedelta(days=3)),
            ("-00:30", timedelta(minutes=-30)),
        ],
    )
    def test_timedelta(self, raw, expected):
        assert make(TimeDeltaParser, "text").try_parse(raw) == Ok(expected)

    @pytest.mark.parametrize("raw", ["25:00", "10:60", "abc", "1.5"])
    def test_timedelta_invalid(self, raw):
        assert make(TimeDeltaParser, "text").try_parse(raw).is_err()

    def test_uuid(self):
        value = uuid.uuid4()
        value_parser = make(UUIDParser, "text")
        assert value_parser.try_parse(str(value)) == Ok(value)
        assert value_parser.try_parse(value.hex) == Ok(value)
        assert value_parser.try_parse("not-a-uuid") == Err("A valid UUID")

    def test_uuid_format(self):
        value = uuid.uuid4()
        value_parser = make(UUIDParser, "text")
        value_parser.format = "B"
        assert value_parser.try_parse("{" + str(value) + "}") == Ok(value)
        assert value_parser.try_parse(str(value)) == Err("A UUID in the format B")

    def test_enum(self):
        value_parser = make(EnumParser, "color", Color)
        assert value_parser.try_parse("red") == Ok(Color.RED)
        assert value_parser.try_parse("GREEN") == Ok(Color.GREEN)
        assert value_parser.try_parse("2") == Ok(Color.GREEN)
        assert value_parser.try_parse("blue") == Err("One of the valid options (see help)")

    def test_enum_requires_enum_type(self):
        with pytest.raises(TypeError):
            make(EnumParser, "color", int)

    def test_enum_help(self):
        value_parser = make(EnumParser, "color", Color)
        value_parser.help = "The color."
        assert value_parser.get_help_text() == "The color. Possible values: RED, GREEN."
        value_parser.enum_value_helps[Color.RED] = "Warm."
        value_parser.enum_value_helps[Color.GREEN] = "Calm."
        assert value_parser.get_help_text() == (
            "The color. Possible values: RED, GREEN.\nRED: Warm.\nGREEN: Calm."
        )

    def test_choice(self):
        value_parser = make(ChoiceParser, "text", ("fast", "slow"))
        assert value_parser.try_parse("slow") == Ok("slow")
        assert value_parser.try_parse("medium") == Err("One of: fast, slow")
        assert value_parser.get_help_text() == "Possible values: fast, slow."

    def test_choice_keeps_type(self):
        value_parser = make(ChoiceParser, "number", (1, 2))
        assert value_parser.try_parse("2") == Ok(2)

    def test_path(self, tmp_path):
        value_parser = make(PathParser, "text")
        missing = tmp_path / "missing.txt"
        assert value_parser.try_parse(str(missing)) == Ok(missing)
        value_parser.must_exist = True
        assert value_parser.try_parse(str(missing)).is_err()
        assert value_parser.try_parse(str(tmp_path)) == Ok(tmp_path)


class TestParserForType:
    """Test suite for the annotation to parser registry."""

    @pytest.mark.parametrize(
        "hint, parser_type",
        [
            (str, StringParser),
            (int, IntParser),
            (float, FloatParser),
            (bool, FlagParser),
            (Decimal, DecimalParser),
            (datetime, DateTimeParser),
            (timedelta, TimeDeltaParser),
            (uuid.UUID, UUIDParser),
            (Path, PathParser),
            (PosixPath, PathParser),
            (Optional[int], IntParser),
            (int | None, IntParser),
        ],
    )
    def test_scalar(self, hint, parser_type):
        assert parser_for_type(hint)[0] is parser_type

    def test_list(self):
        assert parser_for_type(list[int]) == (IntListParser, int)
        assert parser_for_type(Optional[list[str]]) == (StringListParser, str)

    def test_enum_and_literal(self):
        assert parser_for_type(Color) == (EnumParser, Color)
        assert parser_for_type(Literal["a", "b"]) == (ChoiceParser, ("a", "b"))
        assert parser_for_type(list[Color]) == (multi_value(EnumParser), Color)

    def test_unsupported(self):
        with pytest.raises(TypeError):
            parser_for_type(dict[str, int])
        with pytest.raises(TypeError):
            parser_for_type(list[bool])

    def test_register_parser(self):
        class Point:
            pass

        class PointParser(StringParser):
            pass

        register_parser(Point, PointParser)
        assert parser_for_type(Point) == (PointParser, Point)
        assert parser_for_type(list[Point])[0] is multi_value(PointParser)
