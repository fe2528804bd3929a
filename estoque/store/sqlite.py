"""Local data store backed by SQLite."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from .. import schema
from ..errors import StoreError
from . import DataStore
from .sqlite_schema import ensure_schema

logger = logging.getLogger(__name__)


def _bind(value: Any) -> Any:
    """Convert a row value into something sqlite3 can store."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


class SQLiteStore(DataStore):
    """Keeps the six collections in a single SQLite file.

    Foreign keys are enforced, so referenced rows must be written before the
    rows that point at them.
    """

    def __init__(self, db_path: str | Path = "~/.config/estoque/estoque.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._columns: dict[str, set[str]] = {}

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _table_columns(self, collection: str) -> set[str]:
        if collection not in schema.COLLECTIONS:
            raise StoreError(f"Tabela desconhecida: {collection}", collection)
        if collection not in self._columns:
            info = self._get_conn().execute(
                f"PRAGMA table_info({collection})"
            ).fetchall()
            self._columns[collection] = {row["name"] for row in info}
        return self._columns[collection]

    async def select_all(self, collection: str) -> list[dict]:
        self._table_columns(collection)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM {collection} ORDER BY rowid"
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e), collection) from e

        flags = schema.BOOLEAN_COLUMNS.get(collection, frozenset())
        result = []
        for r in rows:
            d = dict(r)
            for key in flags:
                if d.get(key) is not None:
                    d[key] = bool(d[key])
            result.append(d)
        return result

    async def insert(self, collection: str, rows: list[dict]) -> None:
        self._write(collection, rows, replace=False)

    async def upsert(self, collection: str, rows: list[dict]) -> None:
        self._write(collection, rows, replace=True)

    def _write(self, collection: str, rows: list[dict], *, replace: bool) -> None:
        """Write all rows in one transaction; nothing is kept on failure."""
        columns = self._table_columns(collection)
        conn = self._get_conn()
        try:
            with conn:
                for row in rows:
                    row = dict(row)
                    if not row.get("id"):
                        row["id"] = str(uuid.uuid4())
                    unknown = sorted(set(row) - columns)
                    if unknown:
                        raise StoreError(
                            f"Coluna desconhecida em {collection}: "
                            f"{', '.join(unknown)}",
                            collection,
                        )
                    keys = list(row)
                    sql = (
                        f"INSERT INTO {collection} ({', '.join(keys)}) "
                        f"VALUES ({', '.join('?' for _ in keys)})"
                    )
                    if replace:
                        updates = [k for k in keys if k != "id"]
                        if updates:
                            sql += " ON CONFLICT(id) DO UPDATE SET " + ", ".join(
                                f"{k}=excluded.{k}" for k in updates
                            )
                        else:
                            sql += " ON CONFLICT(id) DO NOTHING"
                    conn.execute(sql, [_bind(row[k]) for k in keys])
        except sqlite3.Error as e:
            raise StoreError(str(e), collection) from e

        logger.debug(
            "%s: %d linha(s) gravada(s) (%s)",
            collection,
            len(rows),
            "upsert" if replace else "insert",
        )
