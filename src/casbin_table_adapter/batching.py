"""Batch planner — page bulk mutations to fit the table's batch-write cap."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, TypeVar

from casbin_table_adapter.codec import ID_ATTR, Record

if TYPE_CHECKING:
    from casbin_table_adapter.tables.base import Table

logger = logging.getLogger(__name__)

T = TypeVar("T")

# DynamoDB's documented BatchWriteItem limit.
MAX_BATCH_SIZE = 25


@dataclass(frozen=True)
class WriteOp:
    """One entry of a batch write.

    Attributes:
        kind:   ``"put"`` or ``"delete"``.
        record: The full record for a put, or the ``{"id": ...}`` key for
                a delete.
    """

    kind: Literal["put", "delete"]
    record: Record

    @staticmethod
    def put(record: Record) -> WriteOp:
        return WriteOp(kind="put", record=record)

    @staticmethod
    def delete(record_id: str) -> WriteOp:
        return WriteOp(kind="delete", record={ID_ATTR: record_id})

    @property
    def key(self) -> str:
        return self.record[ID_ATTR]


def plan_batches(items: Sequence[T], page_size: int = MAX_BATCH_SIZE) -> list[list[T]]:
    """Split *items* into consecutive pages of at most *page_size* entries.

    The last page holds the remainder.  No items yields no pages.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    return [list(items[start : start + page_size]) for start in range(0, len(items), page_size)]


async def execute_writes(
    table: Table,
    pages: Sequence[Sequence[T]],
    make_op: Callable[[T], WriteOp],
) -> int:
    """Issue one batch write per page and return the number of operations sent.

    Pages are written one after another.  The first failure propagates and
    pages already written stay written.
    """
    written = 0
    for number, page in enumerate(pages, start=1):
        ops = [make_op(item) for item in page]
        logger.debug("Writing batch %d/%d (%d ops)", number, len(pages), len(ops))
        await table.batch_write(ops)
        written += len(ops)
    return written
