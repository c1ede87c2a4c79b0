"""
Parse errors.

Every problem found in the user's input is reported as a ParseError instance in
``ParseResult.errors`` instead of being raised, so all mistakes of one invocation
can be shown at once. Errors that concern a single option or argument carry its
Name and Role, which lets callers map an error back to its source.
"""

from dataclasses import dataclass

from .names import Name, Role


class ParseError:
    """Base class for all errors collected while parsing."""

    def get_error_message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.get_error_message()


@dataclass
class ValueParserError(ParseError):
    """An error concerning a single option or argument."""

    name: Name
    role: Role = Role.OPTION

    @property
    def label(self) -> str:
        return f"{self.role.value} {self.name}"


@dataclass
class MissingError(ValueParserError):
    def get_error_message(self) -> str:
        return f"The {self.label} is required."


@dataclass
class MultipleValuesError(ValueParserError):
    def get_error_message(self) -> str:
        return (
            f"Multiple values are given for the {self.label}, "
            f"but the {self.role.value} expects a single value."
        )


@dataclass
class ValueMissingError(ValueParserError):
    def get_error_message(self) -> str:
        return f"The {self.label} requires a value, but no value was specified."


@dataclass
class ValueFormatError(ValueParserError):
    """A value that could not be converted to the type of its option or argument."""

    value: str = ""
    expected_format: str = ""

    def get_error_message(self) -> str:
        return (
            f"The value '{self.value}' of the {self.label} has an invalid format. "
            f"The expected format is: {self.expected_format}."
        )


@dataclass
class DuplicateError(ValueParserError):
    def get_error_message(self) -> str:
        return (
            f"The {self.label} is used more than once. "
            f"Please only use each {self.role.value} once."
        )


@dataclass
class UnknownError(ValueParserError):
    def get_error_message(self) -> str:
        return f"The {self.label} is unknown."


@dataclass
class InvalidError(ValueParserError):
    """A free-text problem with an option or argument, usually raised by a validator."""

    message: str = ""

    def get_error_message(self) -> str:
        return f"The {self.label} is invalid: {self.message}"


class InvalidOptionError(InvalidError):
    """An InvalidError for an option."""

    def __init__(self, name: Name, message: str) -> None:
        super().__init__(name, Role.OPTION, message)


class InvalidArgumentError(InvalidError):
    """An InvalidError for an argument."""

    def __init__(self, name: Name, message: str) -> None:
        super().__init__(name, Role.ARGUMENT, message)


@dataclass
class MissingCommandError(ParseError):
    def get_error_message(self) -> str:
        return "No command was specified."


@dataclass
class MoreThanOneCommandError(ParseError):
    def get_error_message(self) -> str:
        return "More than one command specified. Please only specify one command."


@dataclass
class UnknownCommandError(ParseError):
    command_name: str

    def get_error_message(self) -> str:
        return f"The command '{self.command_name}' is unknown."


@dataclass
class UnknownTermError(ParseError):
    """An option marker whose text is not a valid option name, such as a bare ``--``."""

    term: str

    def get_error_message(self) -> str:
        if not self.term:
            return "An option marker without a name was given."
        return f"The option '{self.term}' is unknown."
