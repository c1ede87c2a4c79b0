"""
DataclassCmdParser - declarative command line parsing onto dataclasses.

A Parser holds a set of commands, each bound to an options class. Commands and
their options are declared through ``parser.setup``; ``parser.parse()`` then
turns an argument vector into a ParseResult that carries the selected command,
its populated options instance and every problem found in the input.

Example:
    @dataclass
    class DateOptions:
        date: datetime = field(default_factory=datetime.now, metadata={"help": "Start date."})
        offset: timedelta = timedelta()
        utc: bool = False

    parser = Parser()
    parser.setup.program_name("tool").banner("Tool 1.0")
    command = parser.setup.command(DateOptions).name("date").help("Date arithmetic.")
    command.option("date").short_name("d")
    command.option("offset")
    command.option("utc").help("Display the result in UTC.")

    result = parser.parse(["date", "--utc"])
"""

import os
import shutil
import sys
from typing import Optional, Sequence, TextIO

from loguru import logger

from .builders import ParserSetup
from .commands import CommandParser
from .errors import (
    MissingCommandError,
    MoreThanOneCommandError,
    ParseError,
    UnknownCommandError,
    UnknownError,
    UnknownTermError,
)
from .helptext import (
    render_command_help,
    render_errors,
    render_parser_help,
    render_unknown_command_help,
    with_banner,
)
from .names import Name
from .results import ParseResult
from .tokens import CommandToken, OptionToken, tokenize

HELP_COMMAND = "help"


class Parser:
    """
    Parses command line arguments into the options instance of one of its commands.

    Errors in the user's input never raise. They are collected in the returned
    ParseResult and printed to the error text writer, so the whole input can be
    reported at once. Help requests (no arguments without a default command,
    ``help`` and ``help <command>``) print to the help text writer.
    """

    def __init__(self) -> None:
        self.command_parsers: list[CommandParser] = []
        self.program_name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
        self.banner = ""
        self.help_text_max_line_length = shutil.get_terminal_size().columns
        self.help_text_writer: Optional[TextIO] = sys.stdout
        self.error_text_writer: Optional[TextIO] = sys.stderr
        self.ignore_unknown_options = False
        self.config: dict[str, dict] = {}
        self.setup = ParserSetup(self)

    @property
    def default_command_parser(self) -> Optional[CommandParser]:
        return next((cp for cp in self.command_parsers if cp.is_default), None)

    def parse(self, args: Optional[Sequence[str]] = None) -> ParseResult:
        """
        Parse command line arguments.

        Args:
            args (Optional[Sequence[str]]): The arguments to parse, without the
                program name. If None, uses ``sys.argv[1:]``.

        Returns:
            ParseResult: The selected command, its options and all errors.
        """
        if args is None:
            args = sys.argv[1:]
        args = list(args)

        if (not args and self.default_command_parser is None) or args == [HELP_COMMAND]:
            self._print_help()
            return self._help_result()

        if len(args) == 2 and args[0] == HELP_COMMAND:
            self._print_command_help(args[1])
            return self._help_result()

        result = ParseResult()
        tokens = list(tokenize(args))
        logger.debug("Tokenized {} argument(s) into {} token(s)", len(args), len(tokens))

        command_tokens = [token for token in tokens if isinstance(token, CommandToken)]
        if not command_tokens and self.default_command_parser is None:
            result.add_error(MissingCommandError())
        elif len(command_tokens) > 1:
            result.add_error(MoreThanOneCommandError())
        else:
            for command_parser in self.command_parsers:
                command_parser.parse(tokens, result, self._config_section(command_parser))
            for command_parser in self.command_parsers:
                command_parser.validate(tokens, result)

            for token in tokens:
                if isinstance(token, CommandToken) and not token.consumed:
                    result.add_error(UnknownCommandError(token.name))

            if not self.ignore_unknown_options:
                for token in tokens:
                    if isinstance(token, OptionToken) and not token.consumed:
                        result.add_error(_unknown_option_error(token.name))

        if result.has_errors:
            logger.debug("Parsing failed with {} error(s)", len(result.errors))
            self._print_errors(result)
        return result

    def get_help_text(self, include_banner: bool = True) -> str:
        return render_parser_help(
            self.command_parsers,
            self.program_name,
            self.help_text_max_line_length,
            self.banner if include_banner else "",
        )

    def get_command_help_text(self, command_name: str, include_banner: bool = True) -> str:
        """
        Return the help screen of the command named ``command_name``, or a hint
        to the command list if there is no such command.
        """
        banner = self.banner if include_banner else ""
        command_parser = next(
            (cp for cp in self.command_parsers if cp.name == command_name), None
        )
        if command_parser is None:
            return render_unknown_command_help(command_name, self.program_name, banner)
        return with_banner(
            banner,
            render_command_help(command_parser, self.program_name, self.help_text_max_line_length),
        )

    def get_errors_text(self, result: ParseResult, include_banner: bool = True) -> str:
        return render_errors(
            result.errors,
            result.command_name,
            self.program_name,
            self.banner if include_banner else "",
        )

    def _config_section(self, command_parser: CommandParser) -> dict:
        section = "default" if command_parser.is_default else command_parser.name
        return self.config.get(section) or {}

    def _help_result(self) -> ParseResult:
        result = ParseResult()
        result.is_help_called = True
        return result

    def _print_help(self) -> None:
        if self.help_text_writer is not None:
            self.help_text_writer.write(self.get_help_text())

    def _print_command_help(self, command_name: str) -> None:
        if self.help_text_writer is not None:
            self.help_text_writer.write(self.get_command_help_text(command_name))

    def _print_errors(self, result: ParseResult) -> None:
        if self.error_text_writer is not None:
            self.error_text_writer.write(self.get_errors_text(result))


def _unknown_option_error(text: str) -> ParseError:
    try:
        return UnknownError(Name(text))
    except ValueError:
        return UnknownTermError(text)
