from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from sb2backup.tools import convert_db3
from sb2backup.tools.convert_db3 import main


def test_converts_to_default_output_path(
    make_db3, capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="sb2backup.cli")
    db3 = make_db3(commands=['{"type":"add","amount":5}', '{"type":"remove","amount":2}'])

    assert main(["-i", str(db3)]) == 0

    out = Path(f"{db3}.sb2backup")
    assert json.loads(out.read_bytes())["commands"][-1] == {"type": "remove", "amount": 2}
    assert f"Converting {db3} -> {out}" in capsys.readouterr().out
    assert "Successfully exported 2 commands" in caplog.text
    assert 'Last command is {"type":"remove","amount":2}' in caplog.text


def test_empty_command_table_has_no_last_command(
    make_db3, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="sb2backup.cli")
    out = tmp_path / "custom.sb2backup"

    assert main(["-i", str(make_db3()), "-o", str(out)]) == 0

    assert out.read_bytes() == b'{"db_version":20,"app_version_info":"","commands":[]}\n'
    assert "Successfully exported 0 commands" in caplog.text
    assert "Last command" not in caplog.text


def test_verbose_by_default_and_quiet_flag(make_db3, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="sb2backup.services.reader")
    db3 = make_db3()

    main(["-i", str(db3)])
    assert "DBKeyValue contains no cypher" in caplog.text

    caplog.clear()
    main(["-i", str(db3), "-q"])
    assert "DBKeyValue contains no" not in caplog.text


def test_failure_exits_non_zero_without_output(
    make_db3, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db3 = make_db3(key_values={"schema": "2", "local_version": "1"})
    out = tmp_path / "out.sb2backup"

    assert main(["-i", str(db3), "-o", str(out)]) == 1

    assert "Unknown schema 2, must be 1" in capsys.readouterr().err
    assert not out.exists()


def test_missing_input_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-i", str(tmp_path / "missing.db3")]) == 1
    assert "doesn't exist" in capsys.readouterr().err
    assert not (tmp_path / "missing.db3.sb2backup").exists()


def test_input_flag_is_mandatory() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_port_flag_starts_web_server(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []

    def fake_run(app, **kwargs):  # type: ignore[no-untyped-def]
        calls.append({"app": app, **kwargs})

    monkeypatch.setattr(convert_db3.uvicorn, "run", fake_run)

    assert main(["-port", "8123"]) == 0

    assert len(calls) == 1
    assert calls[0]["port"] == 8123
    assert calls[0]["log_config"] is None
    assert calls[0]["app"].state.settings.port == 8123
