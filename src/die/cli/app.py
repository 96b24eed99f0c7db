"""Command-line front end: ``die [MESSAGE ...] [--code N]``.

Lets shell scripts report a fatal condition the same way Python callers do::

    die --code 3 "argument to -e must be numeric"
    token=$(die --require "$API_TOKEN" "API_TOKEN is not set")
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import sys
from logging.handlers import RotatingFileHandler

from ..config import OUTPUT_FORMATS, DieConfig, load_config, set_config
from ..contracts.error import DEFAULT_EXIT_CODE, ConfigError, Exit, die
from ..result import die_if_none

# --------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------
logger = logging.getLogger("die")

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_MAX_BYTES = 5_000_000
DEFAULT_LOG_BACKUP_COUNT = 5


class JsonFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, DEFAULT_LOG_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    level: int = logging.WARNING,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> None:
    """Configure console (and optional rotating file) logging for the ``die`` logger."""

    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT)

    for handler in list(logger.handlers):
        with contextlib.suppress(Exception):
            handler.close()
        logger.removeHandler(handler)

    logger.setLevel(level)
    logger.propagate = False

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


# --------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="die",
        description="Print a message to stderr and exit with a non-zero code.",
    )
    p.add_argument("message", nargs="*", help="Message words, joined with spaces")
    p.add_argument(
        "-c",
        "--code",
        type=int,
        default=DEFAULT_EXIT_CODE,
        help="Exit code (default: %(default)s)",
    )
    p.add_argument(
        "--require",
        metavar="VALUE",
        default=None,
        help="Print VALUE and exit 0 when it is non-empty; die otherwise",
    )
    p.add_argument("--json", action="store_true", help="Write the message as a JSON envelope")
    p.add_argument("--prefix", default=None, help="Text written before the message")
    p.add_argument("--hard", action="store_true", help="Exit without unwinding (os._exit)")
    p.add_argument(
        "--config",
        default=None,
        help="Path to TOML config file (default: $DIE_CONFIG)",
    )
    p.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (rotates at 5MB, keeps 5 backups by default)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def _effective_config(args: argparse.Namespace) -> DieConfig:
    cfg = load_config(args.config)
    if args.json:
        cfg.output_format = "json"
    if args.prefix is not None:
        cfg.prefix = args.prefix
    if args.hard:
        cfg.hard_exit = True
    return cfg


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        args.log_json,
        args.log_file,
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    try:
        cfg = _effective_config(args)
    except ConfigError as exc:
        print(f"die: {exc}", file=sys.stderr)
        return int(Exit.USAGE)
    set_config(cfg)
    logger.debug("Output format %s, hard exit %s", cfg.output_format, cfg.hard_exit)

    message = " ".join(args.message) or None
    if args.require is not None:
        value = die_if_none(args.require or None, message, args.code)
        print(value)
        return int(Exit.OK)
    die(message, args.code)


def console_main() -> None:
    """Entry point for console_scripts."""

    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    console_main()
