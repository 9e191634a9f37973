"""InMemoryTable — zero-config, dict-backed table for development and testing."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from casbin_table_adapter.batching import MAX_BATCH_SIZE
from casbin_table_adapter.codec import Record
from casbin_table_adapter.exceptions import StoreError
from casbin_table_adapter.tables.base import Table, record_key

if TYPE_CHECKING:
    from casbin_table_adapter.batching import WriteOp
    from casbin_table_adapter.query import ScanFilter


class InMemoryTable(Table):
    """In-memory table keyed by record id.  Data is lost on process exit.

    Oversized batches are rejected the same way the hosted store rejects
    them, so batching bugs surface in tests.
    """

    def __init__(self, max_batch_size: int = MAX_BATCH_SIZE) -> None:
        self.max_batch_size = max_batch_size
        self._data: dict[str, Record] = {}

    async def scan(self, scan_filter: ScanFilter | None = None) -> AsyncIterator[Record]:
        # Snapshot so callers may mutate the table while draining.
        for record in list(self._data.values()):
            if scan_filter is None or scan_filter.matches(record):
                yield dict(record)

    async def put(self, record: Record) -> None:
        self._data[record_key(record, "put")] = dict(record)

    async def delete(self, record_id: str, *, return_old: bool = False) -> Record | None:
        old = self._data.pop(record_id, None)
        return old if return_old else None

    async def batch_write(self, ops: list[WriteOp]) -> None:
        if len(ops) > self.max_batch_size:
            raise StoreError(
                "batch_write",
                f"{len(ops)} operations exceed the limit of {self.max_batch_size}",
            )
        for op in ops:
            if op.kind == "put":
                self._data[record_key(op.record, "batch_write")] = dict(op.record)
            else:
                self._data.pop(op.key, None)

    def __len__(self) -> int:
        return len(self._data)