import sqlite3

from sb2backup import __version__


def get_version_payload() -> dict[str, str]:
    return {"version": __version__, "sqlite_version": sqlite3.sqlite_version}
