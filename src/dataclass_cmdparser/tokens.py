"""
Tokenizer for raw command line arguments.

The tokenizer turns the flat argument vector into command tokens and option
tokens. An option token owns every following term that is not itself an
option marker, so ``["--files", "a", "b"]`` becomes a single token named
``files`` with the values ``["a", "b"]``.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Union

ESCAPE_PREFIX = "\\"


@dataclass
class CommandToken:
    """A term that names the command to run."""

    name: str
    consumed: bool = False


@dataclass
class OptionToken:
    """An option marker (``--name`` or ``-n``) and the values that follow it."""

    name: str
    values: list[str] = field(default_factory=list)
    consumed: bool = False


Token = Union[CommandToken, OptionToken]


def _is_marker(term: str) -> bool:
    return term.startswith("-")


def _strip_marker(term: str) -> str:
    return term[2:] if term.startswith("--") else term[1:]


def _unescape(term: str) -> str:
    """Remove the escape prefix that marks a term as a literal value."""
    return term[1:] if term.startswith(ESCAPE_PREFIX) else term


def tokenize(args: Iterable[str]) -> Iterator[Token]:
    """
    Convert command line arguments into a sequence of tokens.

    A term starting with ``-`` or ``--`` opens an option token; the terms after
    it that are not markers become its values. A term that is not a marker and
    is not preceded by an open option is a command token. A term starting with
    a backslash is taken literally (minus the backslash), which allows values
    such as ``\\-5`` that would otherwise be read as an option marker.

    The tokens are produced lazily while walking the arguments once, so the
    returned iterator cannot be restarted; wrap it in ``list()`` to inspect the
    tokens more than once.

    Args:
        args: The raw command line arguments (without the program name).

    Returns:
        Iterator[Token]: The command and option tokens in input order.

    Raises:
        TypeError: If ``args`` is None.
    """
    if args is None:
        raise TypeError("tokenize() argument 'args' must not be None")

    return _tokenize(iter(args))


def _tokenize(terms: Iterator[str]) -> Iterator[Token]:
    current: Optional[OptionToken] = None

    for term in terms:
        if _is_marker(term):
            if current is not None:
                yield current
            current = OptionToken(_strip_marker(term))
        elif current is not None:
            current.values.append(_unescape(term))
        else:
            yield CommandToken(_unescape(term))

    if current is not None:
        yield current
