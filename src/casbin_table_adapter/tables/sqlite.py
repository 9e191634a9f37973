"""SQLiteTable — durable, single-file table backend using aiosqlite."""

from __future__ import annotations

import json
import re
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

try:
    import aiosqlite
except ImportError as exc:
    raise ImportError(
        "SQLiteTable requires the 'aiosqlite' package. "
        "Install it with: pip install casbin-table-adapter"
    ) from exc

from casbin_table_adapter.batching import MAX_BATCH_SIZE
from casbin_table_adapter.codec import Record
from casbin_table_adapter.exceptions import ConfigError, StoreError
from casbin_table_adapter.tables.base import Table, record_key

if TYPE_CHECKING:
    from casbin_table_adapter.batching import WriteOp
    from casbin_table_adapter.query import ScanFilter

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteTable(Table):
    """Persistent table backed by a single SQLite file.

    Records are stored as JSON next to their id.  Scan filters are applied
    after the rows are read, the way DynamoDB applies filter expressions.

    Parameters:
        db_path:        Path to the SQLite database file.  Use ``":memory:"``
                        for an in-memory database (useful for testing).
        table_name:     SQL table holding the records.
        max_batch_size: Largest accepted ``batch_write``.
    """

    def __init__(
        self,
        db_path: str = "casbin_policies.db",
        table_name: str = "casbin_policies",
        max_batch_size: int = MAX_BATCH_SIZE,
    ) -> None:
        if not _TABLE_NAME.match(table_name):
            raise ConfigError(f"Invalid SQLite table name: '{table_name}'")
        self._db_path = db_path
        self._table = table_name
        self.max_batch_size = max_batch_size
        self._db: aiosqlite.Connection | None = None

    async def _connect(self) -> aiosqlite.Connection:
        if self._db is None:
            try:
                self._db = await aiosqlite.connect(self._db_path)
                await self._db.execute(
                    f"CREATE TABLE IF NOT EXISTS {self._table} ("
                    "id TEXT PRIMARY KEY, record TEXT NOT NULL)"
                )
                await self._db.commit()
            except aiosqlite.Error as exc:
                raise StoreError("connect", str(exc)) from exc
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── Table protocol ───────────────────────────────────────

    async def scan(self, scan_filter: ScanFilter | None = None) -> AsyncIterator[Record]:
        db = await self._connect()
        try:
            cursor = await db.execute(f"SELECT record FROM {self._table}")
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError("scan", str(exc)) from exc
        for row in rows:
            record: Record = json.loads(row[0])
            if scan_filter is None or scan_filter.matches(record):
                yield record

    async def put(self, record: Record) -> None:
        db = await self._connect()
        try:
            await db.execute(
                f"INSERT OR REPLACE INTO {self._table} (id, record) VALUES (?, ?)",
                (record_key(record, "put"), json.dumps(record)),
            )
            await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError("put", str(exc)) from exc

    async def delete(self, record_id: str, *, return_old: bool = False) -> Record | None:
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT record FROM {self._table} WHERE id = ?",
                (record_id,),
            )
            row = await cursor.fetchone()
            await db.execute(f"DELETE FROM {self._table} WHERE id = ?", (record_id,))
            await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError("delete", str(exc)) from exc
        if row is None or not return_old:
            return None
        old: Record = json.loads(row[0])
        return old

    async def batch_write(self, ops: list[WriteOp]) -> None:
        if len(ops) > self.max_batch_size:
            raise StoreError(
                "batch_write",
                f"{len(ops)} operations exceed the limit of {self.max_batch_size}",
            )
        db = await self._connect()
        try:
            for op in ops:
                if op.kind == "put":
                    await db.execute(
                        f"INSERT OR REPLACE INTO {self._table} (id, record) VALUES (?, ?)",
                        (record_key(op.record, "batch_write"), json.dumps(op.record)),
                    )
                else:
                    await db.execute(f"DELETE FROM {self._table} WHERE id = ?", (op.key,))
            await db.commit()
        except aiosqlite.Error as exc:
            await db.rollback()
            raise StoreError("batch_write", str(exc)) from exc