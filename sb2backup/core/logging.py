from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_OWNED_FLAG = "_sb2backup_handler"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Log to stdout and, when ``log_file`` is set, append to that file as well.

    Safe to call more than once: handlers installed by an earlier call are replaced,
    handlers installed by anyone else are left alone.
    """
    teardown_logging()

    root = logging.getLogger()
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    for handler in handlers:
        setattr(handler, _OWNED_FLAG, True)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())


def teardown_logging() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _OWNED_FLAG, False):
            root.removeHandler(handler)
            handler.close()
