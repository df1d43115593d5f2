from __future__ import annotations

from sqlmodel import Field, SQLModel


class DBKeyValue(SQLModel, table=True):
    __tablename__ = "DBKeyValue"

    key: str = Field(primary_key=True)
    value: str | None = None


class DBCommand(SQLModel, table=True):
    __tablename__ = "DBCommand"

    Id: int | None = Field(default=None, primary_key=True)
    data: str | None = None
