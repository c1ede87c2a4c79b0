"""The outcome of one parse call."""

from typing import Any, Callable, Optional, Type

from result import Err, Ok, Result

from .errors import ParseError


class ParseResult:
    """
    The command that was selected, the options instance bound for it, and all
    errors detected while parsing.

    Handlers can be registered per options class and run with ``handle()``, which
    is the usual way for calling code to get a typed options object back:

        result = parser.parse()
        result.command_handler(DateOptions, run_date)
        result.command_handler(GuidOptions, run_guid)
        result.error_handler(lambda result: 1)
        sys.exit(result.handle())
    """

    def __init__(self) -> None:
        self.command_name: str = ""
        self.options: Optional[Any] = None
        self.is_help_called: bool = False
        self._errors: list[ParseError] = []
        self._command_handlers: dict[type, Callable[[Any], Optional[int]]] = {}
        self._error_handler: Optional[Callable[["ParseResult"], Optional[int]]] = None

    @property
    def errors(self) -> tuple[ParseError, ...]:
        return tuple(self._errors)

    @property
    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def add_error(self, error: ParseError) -> None:
        if error is None:
            raise TypeError("add_error() argument 'error' must not be None")
        self._errors.append(error)

    def command_handler(
        self, options_type: Type[Any], handler: Callable[[Any], Optional[int]]
    ) -> None:
        """
        Register the function that handles the command bound to ``options_type``.

        Args:
            options_type: The options class of the command.
            handler: Called with the bound options instance; an int return value
                becomes the return value of ``handle()``.
        """
        if options_type is None:
            raise TypeError("command_handler() argument 'options_type' must not be None")
        if handler is None:
            raise TypeError("command_handler() argument 'handler' must not be None")
        self._command_handlers[options_type] = handler

    def error_handler(self, handler: Callable[["ParseResult"], Optional[int]]) -> None:
        """Register the function that is called when parsing produced errors."""
        if handler is None:
            raise TypeError("error_handler() argument 'handler' must not be None")
        self._error_handler = handler

    def handle(self) -> int:
        """
        Run the handler that matches this result.

        Returns:
            int: The handler's return value if it returned an int, otherwise 0.
        """
        if self.has_errors:
            if self._error_handler is not None:
                return _exit_code(self._error_handler(self))
        elif self.options is not None:
            handler = self._command_handlers.get(type(self.options))
            if handler is not None:
                return _exit_code(handler(self.options))
        return 0

    def as_result(self) -> Result[Any, tuple[ParseError, ...]]:
        """
        Return ``Ok(options)`` for a successful parse, otherwise ``Err(errors)``.

        A help request without errors returns ``Ok(None)``.
        """
        if self.has_errors:
            return Err(self.errors)
        return Ok(self.options)

    def __repr__(self) -> str:
        return (
            f"ParseResult(command_name={self.command_name!r}, "
            f"options={self.options!r}, errors={list(self._errors)!r})"
        )


def _exit_code(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0
