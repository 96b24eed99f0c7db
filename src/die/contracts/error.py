"""Terminal error reporting: print a message to stderr and exit."""

from __future__ import annotations

import contextlib
import json
import logging
import operator
import os
import sys
import threading
from collections.abc import Callable
from contextlib import ContextDecorator
from dataclasses import dataclass
from enum import IntEnum
from types import TracebackType
from typing import Any, NoReturn

logger = logging.getLogger(__name__)

DEFAULT_EXIT_CODE = 1
UNKNOWN_ERROR = "unknown error"

_WRITE_LOCK = threading.Lock()


class Exit(IntEnum):
    """Named exit codes."""

    OK = 0
    FAILURE = 1
    USAGE = 2


class ConfigError(ValueError):
    """Raised for invalid die configuration (TOML file, env overrides)."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


@dataclass(slots=True)
class ErrorEnvelope:
    """Machine-readable form of a fatal message."""

    error: str
    detail: str
    code: int
    hint: str | None = None

    def to_json(self) -> str:
        payload: dict[str, Any] = {"error": self.error, "detail": self.detail, "code": self.code}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


def render(message: Any, *args: Any) -> str | None:
    """Turn a literal or formatter into the text written to stderr.

    ``None`` means "print nothing". Callables are formatters and receive
    ``args`` (the failure payload, or nothing for absent values). A formatter
    or ``__str__`` that raises, or an empty result, renders as
    ``"unknown error"``.
    """

    if message is None:
        return None
    try:
        value = message(*args) if callable(message) else message
        text = str(value)
    except Exception:
        logger.debug("Message could not be rendered, using fallback", exc_info=True)
        return UNKNOWN_ERROR
    return text or UNKNOWN_ERROR


def exception_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _coerce_code(code: Any) -> int:
    try:
        return operator.index(code)
    except Exception:
        logger.warning(
            "Exit code %r is not an integer; using %d", code, DEFAULT_EXIT_CODE
        )
        return DEFAULT_EXIT_CODE


def _resolve_settings(hard: bool | None) -> tuple[str, str, bool]:
    from ..config import DieConfig, get_config

    try:
        cfg = get_config()
    except Exception as exc:
        logger.warning("Ignoring invalid die configuration: %s", exc)
        cfg = DieConfig()
    return cfg.output_format, cfg.prefix, cfg.hard_exit if hard is None else hard


def _write(line: str) -> None:
    stream = sys.stderr
    if stream is None:
        return
    with _WRITE_LOCK, contextlib.suppress(OSError, ValueError):
        stream.write(line)
        stream.flush()


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            with contextlib.suppress(OSError, ValueError):
                stream.flush()


def _blocking_threads() -> list[threading.Thread]:
    """Live non-daemon threads that interpreter shutdown would wait for."""

    main = threading.main_thread()
    return [t for t in threading.enumerate() if t is not main and not t.daemon and t.is_alive()]


def die(
    message: Any = None,
    code: int = DEFAULT_EXIT_CODE,
    *,
    hard: bool | None = None,
    kind: str = "Fatal",
    hint: str | None = None,
) -> NoReturn:
    """Write ``message`` to stderr and terminate the process with ``code``.

    Never returns. By default the exit raises ``SystemExit`` so ``finally``
    blocks and ``atexit`` handlers run; ``hard=True`` (or ``hard_exit`` in the
    config) calls ``os._exit`` instead. The exit is also hard outside the
    main thread, where ``SystemExit`` would only end that thread, and while
    other non-daemon threads are alive, since interpreter shutdown would wait
    for them.

    The first positional argument is always the message: ``die(2)`` prints
    ``2`` and exits 1. Use ``die(code=2)`` to exit 2 without output.
    """

    exit_code = _coerce_code(code)
    output_format, prefix, hard_exit = _resolve_settings(hard)
    text = render(message)

    if text is not None:
        if output_format == "json":
            envelope = ErrorEnvelope(error=kind, detail=text, code=exit_code, hint=hint)
            _write(envelope.to_json() + "\n")
        else:
            _write(f"{prefix}{text}\n")

    if threading.current_thread() is not threading.main_thread():
        hard_exit = True
    elif not hard_exit and (blocking := _blocking_threads()):
        logger.debug("Non-daemon threads still running: %s", [t.name for t in blocking])
        hard_exit = True

    logger.debug("Terminating with exit code %d (hard=%s)", exit_code, hard_exit)
    if hard_exit:
        _flush_std_streams()
        os._exit(exit_code)
    sys.exit(exit_code)


class or_die(ContextDecorator):  # noqa: N801 - reads as a verb at call sites
    """Turn selected exceptions escaping a block or function into :func:`die`.

    The message is a literal, a formatter receiving the exception, or (when
    omitted) the exception's own text. The exception class name becomes the
    JSON envelope ``error`` field.
    """

    def __init__(
        self,
        message: str | Callable[[BaseException], Any] | None = None,
        code: int = DEFAULT_EXIT_CODE,
        *,
        catch: tuple[type[BaseException], ...] = (Exception,),
        hard: bool | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.catch = catch
        self.hard = hard

    def __enter__(self) -> or_die:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None or not isinstance(exc, self.catch):
            return False
        if isinstance(exc, (SystemExit, KeyboardInterrupt)):
            return False
        template = exception_text if self.message is None else self.message
        die(render(template, exc), self.code, hard=self.hard, kind=type(exc).__name__)


__all__ = [
    "DEFAULT_EXIT_CODE",
    "UNKNOWN_ERROR",
    "Exit",
    "ConfigError",
    "ErrorEnvelope",
    "render",
    "exception_text",
    "die",
    "or_die",
]
