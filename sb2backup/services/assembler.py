from __future__ import annotations

from pydantic import BaseModel, Field

from sb2backup.services.raw_json import RawJSON
from sb2backup.services.reader import SourceSnapshot

BACKUP_DB_VERSION = 20


class BackupDocument(BaseModel):
    """The .sb2backup envelope. Field order is the order written to disk."""

    db_version: int = BACKUP_DB_VERSION
    a_token: str | None = None
    e_key_b64: str | None = None
    cypher: str | None = None
    selected_sheet: str | None = None
    last_change_id: int | None = None
    last_change_commands_size: int | None = None
    app_version_info: str = ""
    commands: list[RawJSON] = Field(default_factory=list)


def assemble_backup(snapshot: SourceSnapshot) -> BackupDocument:
    fields: dict[str, str | int] = {}
    for key, lookup in snapshot.lookups.items():
        if not lookup.found or lookup.value is None:
            continue
        # a stored 0 cannot be told apart from a missing counter
        if isinstance(lookup.value, int) and lookup.value == 0:
            continue
        fields[key] = lookup.value

    return BackupDocument(
        db_version=BACKUP_DB_VERSION,
        commands=list(snapshot.commands),
        **fields,
    )
