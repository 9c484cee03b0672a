# services/api/adapters/sqlite/__init__.py
from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    create_engine,
    delete,
    insert,
    select,
    update,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from core.errors import StorageError

# ---- Engine (SQLite) with WAL & pragmas -------------------------------------

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def make_engine(db_url: str) -> Engine:
    # In-memory database: every connection must share the same one
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    # Create data dir if sqlite file
    if db_url.startswith("sqlite:///"):
        file_path = db_url.replace("sqlite:///", "", 1)
        _ensure_dir(file_path)

    engine = create_engine(db_url, future=True, pool_pre_ping=True)

    # Apply pragmas per-connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore
        if isinstance(dbapi_connection, sqlite3.Connection):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.close()

    return engine

# ---- Schema via SQLAlchemy Core ---------------------------------------------

metadata = MetaData()

# One row per JSON document; the collection is part of the key.
documents = Table(
    "documents",
    metadata,
    Column("collection", String, nullable=False),
    Column("key", String, nullable=False),
    Column("data", Text, nullable=False),
    Column("updated_at", DateTime, nullable=False, default=_utcnow),
    PrimaryKeyConstraint("collection", "key", name="pk_documents"),
)

# ---- Adapter implementation --------------------------------------------------

@dataclass(frozen=True)
class SqliteStore:
    engine: Engine

    @classmethod
    def from_url(cls, db_url: str = "sqlite:///data/backoffice.db") -> "SqliteStore":
        eng = make_engine(db_url)
        metadata.create_all(eng)
        return cls(engine=eng)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    select(documents.c.data).where(
                        documents.c.collection == collection,
                        documents.c["key"] == key,
                    )
                ).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {collection}/{key}: {e}", cause=e) from e
        if not row:
            return None
        return json.loads(row[0])

    # Upsert: UPDATE first, INSERT when nothing matched
    def set(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        payload = json.dumps(document, ensure_ascii=False, default=str)
        try:
            with self.engine.begin() as conn:
                res = conn.execute(
                    update(documents)
                    .where(documents.c.collection == collection, documents.c["key"] == key)
                    .values(data=payload, updated_at=_utcnow())
                )
                if res.rowcount == 0:
                    conn.execute(
                        insert(documents).values(
                            collection=collection,
                            key=key,
                            data=payload,
                            updated_at=_utcnow(),
                        )
                    )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {collection}/{key}: {e}", cause=e) from e

    def delete(self, collection: str, key: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    delete(documents).where(
                        documents.c.collection == collection,
                        documents.c["key"] == key,
                    )
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete {collection}/{key}: {e}", cause=e) from e

    def list_keys(self, collection: str) -> List[str]:
        try:
            with self.engine.begin() as conn:
                rows = conn.execute(
                    select(documents.c["key"]).where(documents.c.collection == collection)
                ).all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list {collection}: {e}", cause=e) from e
        return [r[0] for r in rows]

    def ping(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(select(1)).first()
