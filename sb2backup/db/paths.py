from __future__ import annotations

import os
from pathlib import Path


def ensure_dir_writable(directory: Path) -> None:
    """Create ``directory`` if needed and make sure uploads can be written into it."""
    if directory.exists():
        if not directory.is_dir():
            raise RuntimeError(f"Temporary upload path '{directory}' is not a directory.")
        if not os.access(directory, os.W_OK):
            raise RuntimeError(
                f"Temporary upload directory '{directory}' is not writable. "
                "Fix permissions or set SB2BACKUP_TMP_DIR to a writable path."
            )
        return

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RuntimeError(
            f"Temporary upload directory '{directory}' is not writable. "
            "Fix permissions or set SB2BACKUP_TMP_DIR to a writable path."
        ) from exc

    if not os.access(directory, os.W_OK):
        raise RuntimeError(
            f"Temporary upload directory '{directory}' is not writable after creation. "
            "Fix permissions or set SB2BACKUP_TMP_DIR to a writable path."
        )
