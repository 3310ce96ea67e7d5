from __future__ import annotations

import sqlite3
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from .errors import InitializationError


def _sqlite_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # Required for SQLite when used with FastAPI in threaded servers.
        return {"check_same_thread": False}
    return {}


def _supports_snapshots() -> bool:
    return hasattr(sqlite3.Connection, "serialize") and hasattr(sqlite3.Connection, "deserialize")


def create_snapshot_engine(snapshot: Optional[bytes] = None, echo: bool = False) -> Engine:
    """
    Build an engine over a single in-memory SQLite connection.

    When ``snapshot`` is given the connection starts from those bytes
    (the output of a previous :func:`export_snapshot`).
    """
    if not _supports_snapshots():
        raise InitializationError(
            f"sqlite3 {sqlite3.sqlite_version} lacks serialize/deserialize; "
            "Python 3.11+ built against SQLite 3.23+ is required"
        )

    url = "sqlite://"

    def _connect() -> sqlite3.Connection:
        conn = sqlite3.connect(":memory:", **_sqlite_connect_args(url))
        if snapshot is not None:
            conn.deserialize(snapshot)
        return conn

    # StaticPool keeps the one connection alive, otherwise the data is gone.
    return create_engine(url, creator=_connect, poolclass=StaticPool, echo=echo)


def export_snapshot(engine: Engine) -> bytes:
    raw = engine.raw_connection()
    try:
        return raw.driver_connection.serialize()
    finally:
        raw.close()


def init_db(engine: Engine) -> None:
    # Import models so SQLModel sees the metadata.
    from hourlog.models import tracking  # noqa: F401

    SQLModel.metadata.create_all(engine)
