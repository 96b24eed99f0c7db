"""Terminal error contract for die."""

from .error import (
    DEFAULT_EXIT_CODE,
    UNKNOWN_ERROR,
    ConfigError,
    ErrorEnvelope,
    Exit,
    die,
    exception_text,
    or_die,
    render,
)

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
