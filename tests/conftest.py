import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

from die.config import reset_config  # noqa: E402

_DIE_ENV = ("DIE_CONFIG", "DIE_FORMAT", "DIE_PREFIX", "DIE_HARD_EXIT")


@pytest.fixture(autouse=True)
def _isolated_die(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Each test starts from default config and an unconfigured ``die`` logger."""

    for name in _DIE_ENV:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
    die_logger = logging.getLogger("die")
    for handler in list(die_logger.handlers):
        handler.close()
        die_logger.removeHandler(handler)
    die_logger.setLevel(logging.NOTSET)
    die_logger.propagate = True


@pytest.fixture
def subprocess_env() -> dict[str, str]:
    """Environment for child interpreters that import ``die`` from ``src``."""

    env = {k: v for k, v in os.environ.items() if k not in _DIE_ENV}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))
    return env


def pytest_configure(config: pytest.Config) -> None:
    """Ensure custom marks remain registered even when pyproject isn't picked up."""
    config.addinivalue_line("markers", "subprocess: tests that spawn a fresh interpreter")
