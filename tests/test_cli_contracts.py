import contextlib
import io
import json
import shlex
from pathlib import Path

import pytest

from die.cli import app


def run_cli(cmd: str) -> tuple[int, str, str]:
    argv = shlex.split(cmd)
    stdout = io.StringIO()
    stderr = io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        try:
            code = app.main(argv)
        except SystemExit as exc:  # die always exits
            code = exc.code if isinstance(exc.code, int) else 1
    return code, stdout.getvalue(), stderr.getvalue()


def test_message_words_are_joined() -> None:
    code, out, err = run_cli("argument must be   numeric")
    assert code == 1
    assert out == ""
    assert err == "argument must be numeric\n"


def test_explicit_code() -> None:
    code, _, err = run_cli("--code 3 'strange error'")
    assert code == 3
    assert err == "strange error\n"


def test_code_zero_is_honoured() -> None:
    code, _, err = run_cli("-c 0 finished")
    assert code == 0
    assert err == "finished\n"


def test_no_message_exits_silently() -> None:
    code, out, err = run_cli("")
    assert code == 1
    assert out == err == ""

    code, _, err = run_cli("-c 2")
    assert code == 2
    assert err == ""


def test_json_envelope() -> None:
    code, _, err = run_cli("--json -c 4 disk full")
    assert code == 4
    assert json.loads(err) == {"error": "Fatal", "detail": "disk full", "code": 4}


def test_prefix_flag() -> None:
    _, _, err = run_cli("--prefix 'error: ' disk full")
    assert err == "error: disk full\n"


def test_require_present_value_prints_and_succeeds() -> None:
    code, out, err = run_cli("--require token-123 'API_TOKEN is not set'")
    assert code == 0
    assert out == "token-123\n"
    assert err == ""


def test_require_empty_value_dies() -> None:
    code, out, err = run_cli("--require '' -c 78 'API_TOKEN is not set'")
    assert code == 78
    assert out == ""
    assert err == "API_TOKEN is not set\n"


def test_config_file_is_applied(tmp_path: Path) -> None:
    cfg = tmp_path / "die.toml"
    cfg.write_text('[die]\nprefix = "cfg: "\n', encoding="utf-8")
    _, _, err = run_cli(f"--config {cfg} boom")
    assert err == "cfg: boom\n"


def test_bad_config_is_usage_error(tmp_path: Path) -> None:
    cfg = tmp_path / "die.toml"
    cfg.write_text('[die]\noutput_format = "xml"\n', encoding="utf-8")
    code, _, err = run_cli(f"--config {cfg} boom")
    assert code == 2
    assert err.startswith("die: ")
    assert "boom" not in err


def test_bad_code_is_argparse_usage_error() -> None:
    code, _, err = run_cli("--code seven boom")
    assert code == 2
    assert "invalid int value" in err


def test_console_main_exits_with_main_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.argv", ["die", "--require", "ok"])
    with contextlib.redirect_stdout(io.StringIO()), pytest.raises(SystemExit) as excinfo:
        app.console_main()
    assert excinfo.value.code == 0


def test_config_directory_is_usage_error(tmp_path: Path) -> None:
    code, _, err = run_cli(f"--config {tmp_path} boom")
    assert code == 2
    assert err.startswith("die: Cannot read config")
