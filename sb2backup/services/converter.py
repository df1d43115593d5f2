from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sb2backup.services.assembler import BackupDocument, assemble_backup
from sb2backup.services.raw_json import RawJSON
from sb2backup.services.reader import read_source
from sb2backup.services.serializer import render_backup

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".sb2backup"


@dataclass(frozen=True)
class Conversion:
    document: BackupDocument
    payload: bytes

    @property
    def command_count(self) -> int:
        return len(self.document.commands)

    @property
    def last_command(self) -> RawJSON | None:
        if not self.document.commands:
            return None
        return self.document.commands[-1]


def backup_name_for(name: str | Path) -> str:
    return f"{name}{BACKUP_SUFFIX}"


def convert_file(path: Path | str, verbose: bool = False) -> Conversion:
    """Run reader, assembler and serializer over one db3 file.

    Raises a ``ConversionError`` subclass on any failure; nothing partial is returned.
    """
    snapshot = read_source(path, verbose=verbose)
    document = assemble_backup(snapshot)
    payload = render_backup(document)
    logger.debug(
        "converted db3 file",
        extra={"path": str(path), "commands": len(document.commands), "bytes": len(payload)},
    )
    return Conversion(document=document, payload=payload)
