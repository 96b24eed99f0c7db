"""Typed configuration loader for die."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .contracts.error import ConfigError

OUTPUT_FORMATS = frozenset({"text", "json"})
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(raw: Any, name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE:
            return True
        if normalized in _FALSE:
            return False
    raise ConfigError(f"{name} must be boolean", hint="use one of: true, false, 1, 0, yes, no")


@dataclass
class DieConfig:
    output_format: str = "text"
    prefix: str = ""
    hard_exit: bool = False

    def validate(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"die.output_format must be one of {sorted(OUTPUT_FORMATS)}, "
                f"got {self.output_format!r}"
            )
        if not isinstance(self.prefix, str):
            raise ConfigError("die.prefix must be a string")

    @classmethod
    def load(cls, path: Path | None) -> DieConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise ConfigError(f"Config file not found: {path}") from exc
            except (OSError, UnicodeDecodeError) as exc:
                raise ConfigError(f"Cannot read config {path}: {exc}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DieConfig:
        section = data.get("die", {})
        if not isinstance(section, dict):
            raise ConfigError("[die] section must be a table")
        unknown = set(section) - {"output_format", "prefix", "hard_exit"}
        if unknown:
            raise ConfigError(f"Unknown [die] keys: {', '.join(sorted(unknown))}")
        kwargs: dict[str, Any] = dict(section)
        if "hard_exit" in kwargs:
            kwargs["hard_exit"] = _parse_bool(kwargs["hard_exit"], "die.hard_exit")
        return cls(**kwargs)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        raw_format = env.get("DIE_FORMAT")
        if raw_format is not None:
            self.output_format = raw_format.strip().lower()
        raw_prefix = env.get("DIE_PREFIX")
        if raw_prefix is not None:
            self.prefix = raw_prefix
        raw_hard = env.get("DIE_HARD_EXIT")
        if raw_hard is not None:
            try:
                self.hard_exit = _parse_bool(raw_hard, "DIE_HARD_EXIT")
            except ConfigError as exc:
                raise ConfigError(f"Invalid env override DIE_HARD_EXIT={raw_hard!r}") from exc


_CONFIG: DieConfig | None = None


def load_config(path: str | None = None) -> DieConfig:
    """Load config from ``path`` (or ``$DIE_CONFIG``) plus env overrides."""

    raw = path or os.getenv("DIE_CONFIG")
    return DieConfig.load(Path(raw) if raw else None)


def get_config() -> DieConfig:
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def set_config(cfg: DieConfig) -> None:
    global _CONFIG
    cfg.validate()
    _CONFIG = cfg


def reset_config() -> None:
    global _CONFIG
    _CONFIG = None


__all__ = [
    "OUTPUT_FORMATS",
    "DieConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]
