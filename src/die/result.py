"""Ok/Err values and optional values that exit the process on failure.

``Ok(42).die()`` returns ``42``. ``Err("disk full").die()`` prints
``disk full`` to stderr and exits with code 1. Optional values are plain
``T | None``; :func:`die_if_none` unwraps them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar

from .contracts.error import DEFAULT_EXIT_CODE, die, exception_text, render

T = TypeVar("T")
E = TypeVar("E")

Message = str | Callable[..., Any] | None


def _payload_text(error: Any) -> str:
    if error is None:
        return ""
    if isinstance(error, BaseException):
        return exception_text(error)
    return str(error)


def _fail(error: Any, message: Any, code: int) -> NoReturn:
    template = _payload_text if message is None else message
    kind = type(error).__name__ if isinstance(error, BaseException) else "Fatal"
    die(render(template, error), code, kind=kind)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def die(self, message: Message = None) -> T:
        return self.value

    def die_with(self, message: Message) -> T:
        return self.value

    def die_code(self, code: int, message: Message = None) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failure value. The ``die*`` methods never return."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error!r}")

    def unwrap_or(self, default: T) -> T:
        return default

    def die(self, message: Message = None) -> NoReturn:
        """Exit with code 1, printing ``message`` or the error itself."""

        _fail(self.error, message, DEFAULT_EXIT_CODE)

    def die_with(self, message: Message) -> NoReturn:
        """Exit with code 1, printing a literal or ``message(error)``."""

        _fail(self.error, message, DEFAULT_EXIT_CODE)

    def die_code(self, code: int, message: Message = None) -> NoReturn:
        _fail(self.error, message, code)


Result = Ok[T] | Err[E]


def catch(
    fn: Callable[..., T],
    *args: Any,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    **kwargs: Any,
) -> Result[T, BaseException]:
    """Call ``fn`` and capture ``exceptions`` as :class:`Err`."""

    try:
        return Ok(fn(*args, **kwargs))
    except exceptions as exc:
        return Err(exc)


def die_on_error(
    result: Result[T, Any], message: Message = None, code: int = DEFAULT_EXIT_CODE
) -> T:
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Err):
        _fail(result.error, message, code)
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")


def die_if_none(value: T | None, message: Message, code: int = DEFAULT_EXIT_CODE) -> T:
    """Return ``value`` unless it is ``None``, otherwise exit with ``message``.

    Only ``None`` counts as absent; ``0``, ``""`` and empty containers are
    returned. A callable ``message`` is called with no arguments.
    """

    if value is not None:
        return value
    die(render(message), code)


__all__ = ["Ok", "Err", "Result", "Message", "catch", "die_on_error", "die_if_none"]
