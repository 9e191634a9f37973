"""Table protocol — the key-value operations the adapter consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from casbin_table_adapter.batching import MAX_BATCH_SIZE
from casbin_table_adapter.codec import ID_ATTR
from casbin_table_adapter.exceptions import StoreError

if TYPE_CHECKING:
    from casbin_table_adapter.batching import WriteOp
    from casbin_table_adapter.codec import Record
    from casbin_table_adapter.query import ScanFilter


class Table(ABC):
    """Abstract base for all table backends.

    A table holds flat ``dict[str, str]`` records keyed by their ``id``
    attribute.  Backends wrap their own failures in
    :class:`~casbin_table_adapter.exceptions.StoreError` and never retry.
    """

    max_batch_size: int = MAX_BATCH_SIZE

    @abstractmethod
    def scan(self, scan_filter: ScanFilter | None = None) -> AsyncIterator[Record]:
        """Yield every record, following pagination until exhausted."""
        ...

    @abstractmethod
    async def put(self, record: Record) -> None:
        """Create or overwrite a record."""
        ...

    @abstractmethod
    async def delete(self, record_id: str, *, return_old: bool = False) -> Record | None:
        """Delete a record.  No-op if it does not exist.

        With *return_old*, return the deleted record, or ``None`` if there
        was nothing to delete.
        """
        ...

    @abstractmethod
    async def batch_write(self, ops: list[WriteOp]) -> None:
        """Apply up to ``max_batch_size`` puts and deletes in one call."""
        ...

    async def close(self) -> None:
        """Release any held connection.  Default is a no-op."""


def record_key(record: Record, operation: str) -> str:
    """Return the record's id, raising ``StoreError`` if it has none."""
    record_id = record.get(ID_ATTR)
    if not record_id:
        raise StoreError(operation, f"record has no '{ID_ATTR}' attribute")
    return record_id
