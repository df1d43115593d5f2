from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy import event, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlmodel import Session, create_engine, select

from sb2backup.core.errors import (
    CommandQueryError,
    CommandScanError,
    MissingLocalVersionError,
    MissingSchemaError,
    NotFoundError,
    OpenError,
    UnsupportedSchemaError,
)
from sb2backup.db.models import DBCommand, DBKeyValue
from sb2backup.services.raw_json import RawJSON

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA = 1

# Optional keys in output order, with their type and what a miss means for the user.
OPTIONAL_KEYS: dict[str, tuple[type, str]] = {
    "a_token": (str, "no cloud sync set up"),
    "e_key_b64": (str, "no cloud sync set up"),
    "cypher": (str, "no cloud sync set up"),
    "selected_sheet": (str, "selected sheet will not be restored"),
    "last_change_id": (int, "no cloud sync set up"),
    "last_change_commands_size": (int, "no cloud sync set up"),
}


@dataclass(frozen=True)
class KeyLookup:
    key: str
    value: str | int | None = None
    problem: str | None = None

    @property
    def found(self) -> bool:
        return self.problem is None


@dataclass
class SourceSnapshot:
    schema: int
    local_version: int
    lookups: dict[str, KeyLookup] = field(default_factory=dict)
    commands: list[RawJSON] = field(default_factory=list)


def _bytes_text_factory(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    # TEXT comes back undecoded so bad UTF-8 surfaces as a scan error in our code.
    dbapi_connection.text_factory = bytes


def _open_engine(path: Path) -> Engine:
    engine = create_engine(URL.create("sqlite", database=str(path)), poolclass=NullPool)
    event.listen(engine, "connect", _bytes_text_factory)
    return engine


def _as_text(raw: object) -> str:
    if raw is None:
        raise ValueError("value is NULL")
    if isinstance(raw, bytes):
        return raw.decode("utf-8")
    return str(raw)


def _as_int(raw: object) -> int:
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"cannot read {raw!r} as an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw.is_integer():
            return int(raw)
        raise ValueError(f"cannot read {raw!r} as an integer")
    return int(_as_text(raw))


def _fetch_value(session: Session, key: str) -> object:
    """Return the raw value stored under ``key``; ``KeyError`` when the row is missing."""
    statement = select(DBKeyValue.key, DBKeyValue.value).where(DBKeyValue.key == key)
    row = session.exec(statement).first()
    if row is None:
        raise KeyError(key)
    return row[1]


def _required_int(session: Session, key: str, error_cls: type[Exception]) -> int:
    try:
        return _as_int(_fetch_value(session, key))
    except KeyError as exc:
        raise error_cls(f"DBKeyValue contains no {key}") from exc
    except (SQLAlchemyError, ValueError) as exc:
        raise error_cls(f"DBKeyValue contains no {key}, {exc}") from exc


def lookup_optional(session: Session, key: str, kind: type) -> KeyLookup:
    try:
        raw = _fetch_value(session, key)
        value = _as_int(raw) if kind is int else _as_text(raw)
    except KeyError:
        return KeyLookup(key=key, problem="key is missing")
    except (SQLAlchemyError, ValueError) as exc:
        return KeyLookup(key=key, problem=str(exc))
    return KeyLookup(key=key, value=value)


def read_commands(session: Session) -> list[RawJSON]:
    try:
        result = session.exec(select(DBCommand.data).order_by(DBCommand.Id))
    except SQLAlchemyError as exc:
        raise CommandQueryError(f"Cannot query DBCommand table, {exc}") from exc

    commands: list[RawJSON] = []
    try:
        for data in result:
            if data is None:
                raise CommandScanError("Error scanning DBCommands, data is NULL")
            commands.append(RawJSON(_as_text(data)))
    except (SQLAlchemyError, UnicodeDecodeError) as exc:
        raise CommandScanError(f"Error scanning DBCommands, {exc}") from exc
    return commands


def read_source(path: Path | str, verbose: bool = False) -> SourceSnapshot:
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"database doesn't exist: {path}")

    engine = _open_engine(path)
    try:
        with Session(engine) as session:
            try:
                session.exec(text("SELECT count(*) FROM sqlite_master")).first()
            except SQLAlchemyError as exc:
                raise OpenError(f"sqlite3 could not open input file, {exc}") from exc

            schema = _required_int(session, "schema", MissingSchemaError)
            local_version = _required_int(session, "local_version", MissingLocalVersionError)
            if schema != SUPPORTED_SCHEMA:
                raise UnsupportedSchemaError(
                    f"Unknown schema {schema}, must be {SUPPORTED_SCHEMA}"
                )

            snapshot = SourceSnapshot(schema=schema, local_version=local_version)
            for key, (kind, consequence) in OPTIONAL_KEYS.items():
                lookup = lookup_optional(session, key, kind)
                if not lookup.found and verbose:
                    logger.info("DBKeyValue contains no %s - %s", key, consequence)
                snapshot.lookups[key] = lookup

            snapshot.commands = read_commands(session)
    finally:
        engine.dispose()
    return snapshot
