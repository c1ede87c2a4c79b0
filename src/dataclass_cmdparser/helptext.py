"""
Help and error text rendering.

All functions return plain text with a trailing newline, ready to be written to
a stream. The layout of a command's help looks like this:

    tool date [-d|--date value] [--offset value] [--utc]

    Adds a time span to a date.

    Options:
    -d|--date [value]  (Optional) The date to start from.
    --offset [value]   (Optional) The time span to add.
    --utc              (Optional) Display the result in UTC.

    Example usage:
    tool date --date 2024-01-31 --offset 1.00:00
"""

import textwrap
from typing import Iterable, Sequence

from .commands import CommandParser
from .errors import ParseError
from .names import Role
from .values import ValueKind, ValueParser

# Width of "(Required) " / "(Optional) " including the separating space in front.
_REQUIREMENT_COLUMN = 1 + len("(Required) ")


def word_wrap(text: str, width: int) -> list[str]:
    """
    Greedily wrap ``text`` into lines of at most ``width`` characters.

    Lines are broken at whitespace only; a word longer than ``width`` gets a line
    of its own instead of being split. Line breaks in ``text`` are kept.

    Args:
        text (str): The text to wrap.
        width (int): The maximum line length.

    Returns:
        list[str]: The wrapped lines; ``[""]`` for empty text.

    Raises:
        TypeError: If ``text`` is None.
    """
    if text is None:
        raise TypeError("word_wrap() argument 'text' must not be None")
    if text == "":
        return [""]

    width = max(width, 1)
    lines: list[str] = []
    for paragraph in text.split("\n"):
        wrapped = textwrap.wrap(
            paragraph,
            width=width,
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [""])
    return lines


def _marker(value_parser: ValueParser) -> str:
    name = value_parser.name
    if name.short_name is not None:
        return f"-{name.short_name}|--{name.name}"
    return f"--{name.name}"


def usage_part(value_parser: ValueParser) -> str:
    """The bracketed form of a value parser in the usage line, e.g. ``[--files value value ...]``."""
    marker = _marker(value_parser)
    if value_parser.value_kind is ValueKind.SINGLE_VALUE:
        return f"[{marker} value]"
    if value_parser.value_kind is ValueKind.MULTI_VALUE:
        return f"[{marker} value value ...]"
    return f"[{marker}]"


def table_part(value_parser: ValueParser) -> str:
    """The left column of a value parser in the options table, e.g. ``--date [value]``."""
    marker = _marker(value_parser)
    if value_parser.value_kind is ValueKind.SINGLE_VALUE:
        return f"{marker} [value]"
    if value_parser.value_kind is ValueKind.MULTI_VALUE:
        return f"{marker} [value value ...]"
    return marker


def _table_rows(
    value_parsers: Iterable[ValueParser], name_width: int, max_line_length: int
) -> list[str]:
    help_column = name_width + _REQUIREMENT_COLUMN
    rows = []
    for value_parser in value_parsers:
        requirement = "(Required) " if value_parser.is_required else "(Optional) "
        help_lines = word_wrap(value_parser.get_help_text(), max_line_length - help_column)
        for index, help_line in enumerate(help_lines):
            if index == 0:
                prefix = f"{table_part(value_parser).ljust(name_width)} {requirement}"
            else:
                prefix = " " * help_column
            rows.append(f"{prefix}{help_line}")
    return rows


def render_command_help(
    command_parser: CommandParser, program_name: str, max_line_length: int
) -> str:
    """
    Render the help screen of one command.

    Args:
        command_parser (CommandParser): The command to describe.
        program_name (str): Shown at the start of the usage line.
        max_line_length (int): Help texts in the options table are wrapped to fit.

    Returns:
        str: The usage line, the command help, the option and argument tables
        and the example usage.
    """
    usage = [program_name]
    if not command_parser.is_default and command_parser.name:
        usage.append(command_parser.name)
    usage.extend(usage_part(value_parser) for value_parser in command_parser.value_parsers)

    lines = [" ".join(usage), ""]

    if command_parser.help:
        lines.append(command_parser.help)
        lines.append("")

    options = [vp for vp in command_parser.value_parsers if vp.role is Role.OPTION]
    arguments = [vp for vp in command_parser.value_parsers if vp.role is Role.ARGUMENT]
    name_width = max(
        (len(table_part(value_parser)) for value_parser in command_parser.value_parsers),
        default=0,
    )

    if options or not arguments:
        lines.append("Options:")
        lines.extend(_table_rows(options, name_width, max_line_length))
    if arguments:
        if options:
            lines.append("")
        lines.append("Arguments:")
        lines.extend(_table_rows(arguments, name_width, max_line_length))

    if command_parser.example_usage:
        lines.append("")
        lines.append("Example usage:")
        lines.append(command_parser.example_usage)

    return "\n".join(lines) + "\n"


def render_parser_help(
    command_parsers: Sequence[CommandParser],
    program_name: str,
    max_line_length: int,
    banner: str = "",
) -> str:
    """
    Render the general help screen: the default command's help, the list of
    commands and how to get help for a single command.
    """
    lines = _banner_lines(banner)

    default_command = next((cp for cp in command_parsers if cp.is_default), None)
    if default_command is not None:
        lines.append(render_command_help(default_command, program_name, max_line_length))

    named_commands = [cp for cp in command_parsers if not cp.is_default]
    if named_commands:
        lines.append(f"{program_name} <command> [options]")
        lines.append("")
        lines.append("Commands:")
        name_width = max(len(cp.name) for cp in named_commands)
        lines.extend(f"{cp.name.ljust(name_width)}\t{cp.help}" for cp in named_commands)
        lines.append("")

    lines.append(f"{program_name} help")
    lines.append("Prints this help screen.")

    if named_commands:
        lines.append("")
        lines.append(f"{program_name} help <command>")
        lines.append("Prints the help screen for the specified command.")

    return "\n".join(lines) + "\n"


def render_unknown_command_help(command_name: str, program_name: str, banner: str = "") -> str:
    lines = _banner_lines(banner)
    lines.append(f"The command '{command_name}' is unknown.")
    lines.append("Try the following command to get a list of valid commands:")
    lines.append(f"{program_name} help")
    return "\n".join(lines) + "\n"


def render_errors(
    errors: Sequence[ParseError],
    command_name: str,
    program_name: str,
    banner: str = "",
) -> str:
    """
    Render the error report for a failed parse.

    Returns:
        str: The error messages followed by a hint how to get help, or an empty
        string if there are no errors.
    """
    if not errors:
        return ""

    lines = _banner_lines(banner)
    lines.append("Invalid or missing option(s):")
    lines.extend(f"- {error.get_error_message()}" for error in errors)
    lines.append("")
    lines.append("Try the following command to get help:")
    hint = f"{program_name} help"
    if command_name:
        hint += f" {command_name}"
    lines.append(hint)
    return "\n".join(lines) + "\n"


def with_banner(banner: str, text: str) -> str:
    return "\n".join(_banner_lines(banner)) + ("\n" if banner else "") + text


def _banner_lines(banner: str) -> list[str]:
    return [banner, ""] if banner else []
