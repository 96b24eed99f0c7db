"""Print a message to stderr and exit: terminal unwrapping for CLI programs."""

from .config import DieConfig, get_config, load_config, reset_config, set_config
from .contracts import DEFAULT_EXIT_CODE, ConfigError, ErrorEnvelope, Exit, die, or_die, render
from .result import Err, Ok, Result, catch, die_if_none, die_on_error

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EXIT_CODE",
    "Exit",
    "ConfigError",
    "ErrorEnvelope",
    "render",
    "die",
    "or_die",
    "Ok",
    "Err",
    "Result",
    "catch",
    "die_on_error",
    "die_if_none",
    "DieConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]
