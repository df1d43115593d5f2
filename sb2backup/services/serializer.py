from __future__ import annotations

import io
import json

from sb2backup.core.errors import EncodeError
from sb2backup.services.assembler import BackupDocument


def _dumps(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def render_backup(document: BackupDocument) -> bytes:
    """Encode ``document`` as UTF-8 JSON.

    Unset optional fields are left out. Commands are written verbatim between
    the array brackets, they are JSON already and must not be re-quoted.
    """
    buffer = io.StringIO()
    try:
        buffer.write("{")
        fields = document.model_dump(exclude={"commands"}, exclude_none=True)
        for name, value in fields.items():
            buffer.write(f"{_dumps(name)}:{_dumps(value)},")
        buffer.write('"commands":[')
        buffer.write(",".join(document.commands))
        buffer.write("]}\n")
        return buffer.getvalue().encode("utf-8")
    except (MemoryError, TypeError, ValueError) as exc:
        raise EncodeError(f"Error encoding json, {exc}") from exc
