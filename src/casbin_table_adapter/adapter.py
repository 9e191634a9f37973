"""TableAdapter — Casbin policy storage on top of a key-value table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from casbin.persist.adapters.asyncio import (
    AsyncAdapter,
    AsyncBatchAdapter,
    AsyncFilteredAdapter,
)

from casbin_table_adapter.batching import WriteOp, execute_writes, plan_batches
from casbin_table_adapter.codec import ID_ATTR, Record, decode, derive_id, encode
from casbin_table_adapter.exceptions import InvalidPolicyError
from casbin_table_adapter.filter import Filter
from casbin_table_adapter.query import build_prefix_filter, collect_ids, scan_all

if TYPE_CHECKING:
    from casbin.model import Model

    from casbin_table_adapter.tables.base import Table

logger = logging.getLogger(__name__)

_SECTIONS = ("p", "g")


class TableAdapter(AsyncAdapter, AsyncBatchAdapter, AsyncFilteredAdapter):
    """Loads and persists an enforcer's policy rules in a :class:`Table`.

    Plug it into ``casbin.AsyncEnforcer(model, adapter)``.  Every rule is
    one record whose id is derived from the rule itself, so single
    removals need no read.  Bulk writes are split into pages of
    ``batch_size`` and sent one page at a time; a failing page aborts the
    operation and leaves earlier pages in place.

    Parameters:
        table:      Table backend holding the records.
        batch_size: Operations per batch write.  Defaults to the table's
                    ``max_batch_size``.
    """

    def __init__(self, table: Table, batch_size: int | None = None) -> None:
        self._table = table
        self._batch_size = batch_size if batch_size is not None else table.max_batch_size
        if self._batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self._batch_size}")
        self._is_filtered = False

    # ── loading ──────────────────────────────────────────────

    async def load_policy(self, model: Model) -> None:
        """Load every stored rule into *model*."""
        await self._load_into_model(model, Filter())

    async def load_filtered_policy(self, model: Model, filter: Any = None) -> None:
        """Load only the rules that match *filter* into *model*.

        *filter* is a :class:`Filter` or any object with ``P``/``G``
        pattern lists.  ``is_filtered()`` reports afterwards whether any
        rule was left out.
        """
        self._is_filtered = await self._load_into_model(model, Filter.coerce(filter))

    def is_filtered(self) -> bool:
        # The enforcer calls this synchronously.
        return self._is_filtered

    async def _load_into_model(self, model: Model, filter: Filter) -> bool:
        filtered = False
        loaded = 0
        async for record in scan_all(self._table):
            ptype, rule = decode(record)
            if not ptype or not rule:
                raise InvalidPolicyError(record.get(ID_ATTR))

            sec = "p" if ptype[0] == "p" else "g"
            if filter.excludes(sec, rule):
                filtered = True
                continue
            model.add_policy(sec, ptype, rule)
            loaded += 1

        logger.debug("Loaded %d rules (filtered=%s)", loaded, filtered)
        return filtered

    # ── whole-model writes ───────────────────────────────────

    async def save_policy(self, model: Model) -> bool:
        """Write every rule of *model* to the table.

        Existing records are overwritten, not cleared first.
        """
        records: list[Record] = []
        for sec in _SECTIONS:
            for ptype, assertion in model.model.get(sec, {}).items():
                records.extend(encode(ptype, rule) for rule in assertion.policy)

        if not records:
            return True
        written = await self._write(records, WriteOp.put)
        logger.info("Saved %d rules", written)
        return True

    async def clear_policy(self) -> bool:
        """Delete every record in the table."""
        ids = await collect_ids(self._table)
        if not ids:
            return True
        removed = await self._write(ids, WriteOp.delete)
        logger.info("Cleared %d rules", removed)
        return True

    # ── single-rule and batch mutations ──────────────────────

    async def add_policy(self, sec: str, ptype: str, rule: list[str]) -> bool:
        await self._table.put(encode(ptype, rule))
        return True

    async def add_policies(self, sec: str, ptype: str, rules: list[list[str]]) -> bool:
        if not rules:
            return False
        await self._write([encode(ptype, rule) for rule in rules], WriteOp.put)
        return True

    async def remove_policy(self, sec: str, ptype: str, rule: list[str]) -> bool:
        """Delete one rule.  Returns ``False`` if it was not stored."""
        old = await self._table.delete(derive_id(ptype, rule), return_old=True)
        return old is not None

    async def remove_policies(self, sec: str, ptype: str, rules: list[list[str]]) -> bool:
        """Delete several rules.  Does not report which of them existed."""
        if not rules:
            return False
        await self._write([derive_id(ptype, rule) for rule in rules], WriteOp.delete)
        return True

    async def remove_filtered_policy(
        self,
        sec: str,
        ptype: str,
        field_index: int,
        *field_values: str | Sequence[str],
    ) -> bool:
        """Delete every *ptype* rule whose fields match *field_values*.

        The first value is compared with field ``field_index``, the next
        value with the next field, and so on.  Empty values match anything.
        Values may be passed one by one, as the enforcer does, or as a
        single list.  Returns ``False`` when no values are given or nothing
        matched.
        """
        if len(field_values) == 1 and isinstance(field_values[0], (list, tuple)):
            field_values = tuple(field_values[0])
        if not field_values:
            return False

        ids = await collect_ids(self._table, build_prefix_filter(ptype, field_index, field_values))
        if not ids:
            return False
        removed = await self._write(ids, WriteOp.delete)
        logger.info(
            "Removed %d '%s' rules matching %r from field %d",
            removed,
            ptype,
            field_values,
            field_index,
        )
        return True

    # ── lifecycle ────────────────────────────────────────────

    async def close(self) -> None:
        await self._table.close()

    @property
    def table(self) -> Table:
        return self._table

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def _write(self, items: Sequence[Any], make_op: Callable[[Any], WriteOp]) -> int:
        return await execute_writes(self._table, plan_batches(items, self._batch_size), make_op)
