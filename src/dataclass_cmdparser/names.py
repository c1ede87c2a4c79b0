"""Names of options and arguments."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(Enum):
    """Whether a value parser is presented to the user as an option or an argument."""

    OPTION = "option"
    ARGUMENT = "argument"


@dataclass(frozen=True)
class Name:
    """
    The long name and optional single character short name of an option or argument.

    Example:
        Name("output", "o") matches both ``--output`` and ``-o`` on the command line
        and is displayed as ``-o (--output)``.
    """

    name: str
    short_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Name must be a non-empty string.")
        if self.name.startswith("-"):
            raise ValueError(
                f"Name '{self.name}' must be given without the leading dashes."
            )
        if any(char.isspace() for char in self.name):
            raise ValueError(f"Name '{self.name}' must not contain whitespace.")
        if self.short_name is not None:
            if not isinstance(self.short_name, str) or len(self.short_name) != 1:
                raise ValueError(
                    f"Short name {self.short_name!r} must be a single character."
                )
            if self.short_name == "-" or self.short_name.isspace():
                raise ValueError(
                    f"Short name {self.short_name!r} is not a valid option character."
                )

    def matches(self, text: str) -> bool:
        """Return True if ``text`` (without dashes) is the long or the short name."""
        return text == self.name or (
            self.short_name is not None and text == self.short_name
        )

    def with_name(self, name: str) -> "Name":
        return Name(name, self.short_name)

    def with_short_name(self, short_name: Optional[str]) -> "Name":
        return Name(self.name, short_name)

    def __str__(self) -> str:
        if self.short_name is not None:
            return f"-{self.short_name} (--{self.name})"
        return f"--{self.name}"
