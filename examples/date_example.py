#!/usr/bin/env python3
"""
Example script demonstrating the usage of DataclassCmdParser.

This script declares two commands, each bound to its own options dataclass,
and dispatches the parse result to a handler per command.

Try:
    python date_example.py help
    python date_example.py help date
    python date_example.py date --date 2024-01-31 --offset 1.12:00 --utc
    python date_example.py guid --format B --upper-case
    python date_example.py date --offset soon
"""

import sys
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from loguru import logger

from dataclass_cmdparser import InvalidOptionError, Parser


@dataclass
class DateOptions:
    """Options of the date command."""

    date: datetime = field(
        default_factory=datetime.now, metadata={"help": "The date to start from."}
    )
    offset: timedelta = field(
        default=timedelta(), metadata={"help": "The time span to add to the date."}
    )
    utc: bool = field(default=False, metadata={"help": "Display the result in UTC."})


class GuidFormat(Enum):
    N = "n"
    D = "d"
    B = "b"
    P = "p"


@dataclass
class GuidOptions:
    """Options of the guid command."""

    format: GuidFormat = field(default=GuidFormat.D, metadata={"help": "Output format."})
    upper_case: bool = field(default=False, metadata={"help": "Print upper case digits."})
    count: int = field(default=1, metadata={"help": "Number of UUIDs to generate."})


def validate_date(context) -> None:
    if context.options.utc and context.options.date.tzinfo is not None:
        context.add_error(
            InvalidOptionError(
                context.get_option_name("utc"),
                "The date already has a time zone.",
            )
        )


def run_date(options: DateOptions) -> int:
    value = options.date + options.offset
    if options.utc:
        value = value.astimezone(timezone.utc)
    print(value.isoformat())
    return 0


def run_guid(options: GuidOptions) -> int:
    for _ in range(options.count):
        value = uuid.uuid4()
        text = {
            GuidFormat.N: value.hex,
            GuidFormat.D: str(value),
            GuidFormat.B: "{" + str(value) + "}",
            GuidFormat.P: "(" + str(value) + ")",
        }[options.format]
        print(text.upper() if options.upper_case else text)
    return 0


def main() -> int:
    """Main function demonstrating the parser."""
    logger.enable("dataclass_cmdparser")
    logger.remove()
    logger.add(sys.stderr, level="WARNING")

    parser = Parser()
    parser.setup.program_name("date_example").banner("Date example 1.0")

    date = (
        parser.setup.command(DateOptions)
        .name("date")
        .help("Adds a time span to a date.")
        .example_usage("date_example date --date 2024-01-31 --offset 1.12:00 --utc")
        .validate(validate_date)
    )
    date.option("date").short_name("d")
    date.option("offset").short_name("o")
    date.option("utc")

    guid = parser.setup.command(GuidOptions).name("guid").help("Generates UUIDs.")
    guid.option("format").short_name("f").enum_value_help(
        GuidFormat.N, "32 digits."
    ).enum_value_help(GuidFormat.D, "32 digits separated by hyphens.").enum_value_help(
        GuidFormat.B, "Hyphenated digits in braces."
    ).enum_value_help(GuidFormat.P, "Hyphenated digits in parentheses.")
    guid.option("upper_case").short_name("u")
    guid.option("count").short_name("c").range(1, 100)

    result = parser.parse()
    result.command_handler(DateOptions, run_date)
    result.command_handler(GuidOptions, run_guid)
    result.error_handler(lambda parse_result: 1)
    return result.handle()


if __name__ == "__main__":
    sys.exit(main())
