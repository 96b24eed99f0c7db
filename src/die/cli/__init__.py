"""Command-line interface for die."""

from .app import configure_logging, console_main, main

__all__ = ["configure_logging", "console_main", "main"]
