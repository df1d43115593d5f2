from __future__ import annotations

import os
import sqlite3
from collections.abc import Callable, Iterable, Iterator, Mapping
from pathlib import Path

import pytest

from sb2backup.core.config import Settings
from sb2backup.core.logging import teardown_logging

BASE_KEYS = {"schema": "1", "local_version": "1"}


def pytest_configure() -> None:
    os.environ.setdefault("SB2BACKUP_LOG_FILE", str(Path.cwd() / ".pytest-sb2backup.log"))
    os.environ.setdefault("SB2BACKUP_TMP_DIR", str(Path.cwd() / ".pytest-sb2backup-tmp"))


@pytest.fixture(autouse=True)
def _drop_log_handlers() -> Iterator[None]:
    yield
    teardown_logging()


def write_db3(
    path: Path,
    key_values: Mapping[str, object] | None = None,
    commands: Iterable[object | tuple[int, object]] = (),
    *,
    key_value_table: bool = True,
    command_table: bool = True,
) -> Path:
    """Build a db3 file the way the app lays it out.

    ``commands`` holds either bare ``data`` values (ids assigned in order) or ``(Id, data)``.
    """
    with sqlite3.connect(path) as conn:
        if key_value_table:
            conn.execute("CREATE TABLE DBKeyValue (key TEXT PRIMARY KEY, value TEXT)")
            items = BASE_KEYS if key_values is None else key_values
            conn.executemany("INSERT INTO DBKeyValue (key, value) VALUES (?, ?)", items.items())
        if command_table:
            conn.execute("CREATE TABLE DBCommand (Id INTEGER PRIMARY KEY, data TEXT)")
            for index, command in enumerate(commands, start=1):
                row_id, data = command if isinstance(command, tuple) else (index, command)
                conn.execute("INSERT INTO DBCommand (Id, data) VALUES (?, ?)", (row_id, data))
        conn.commit()
    conn.close()
    return path


@pytest.fixture
def make_db3(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "budget.db3", *args: object, **kwargs: object) -> Path:
        return write_db3(tmp_path / name, *args, **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def web_settings(tmp_path: Path) -> Settings:
    return Settings(log_file=tmp_path / "log.txt", tmp_dir=tmp_path / "uploads")
