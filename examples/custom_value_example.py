#!/usr/bin/env python3
"""
Example script demonstrating a custom value type.

A value parser for a new type only has to implement ``try_parse``; the
parser for lists of that type is derived with ``multi_value``.

Try:
    python custom_value_example.py --origin 1,2 --points 3,4 5,6
    python custom_value_example.py --origin 1
"""

import math
import sys
from dataclasses import dataclass, field
from typing import Optional

from result import Err, Ok, Result

from dataclass_cmdparser import Parser, SingleValueParser, multi_value


@dataclass(frozen=True)
class Point:
    x: float
    y: float


class PointParser(SingleValueParser):
    """Parses points written as ``x,y``."""

    def try_parse(self, raw: str) -> Result[Point, str]:
        parts = raw.split(",")
        if len(parts) == 2:
            try:
                return Ok(Point(float(parts[0]), float(parts[1])))
            except ValueError:
                pass
        return Err("Two numbers separated by a comma, e.g. 1.5,2")


@dataclass
class DistanceOptions:
    origin: Optional[Point] = field(default=None, metadata={"help": "Point to measure from."})
    points: list[Point] = field(default_factory=list, metadata={"help": "Points to measure to."})


def run(options: DistanceOptions) -> int:
    for point in options.points:
        distance = math.hypot(point.x - options.origin.x, point.y - options.origin.y)
        print(f"{point.x},{point.y}: {distance:.3f}")
    return 0


def main() -> int:
    parser = Parser()
    command = parser.setup.default_command(DistanceOptions).help(
        "Prints the distance of each point to the origin."
    )
    command.option("origin", PointParser).required()
    command.option("points", multi_value(PointParser)).required()

    result = parser.parse()
    result.command_handler(DistanceOptions, run)
    result.error_handler(lambda parse_result: 1)
    return result.handle()


if __name__ == "__main__":
    sys.exit(main())
