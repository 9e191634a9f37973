"""Scan helpers — filter expressions and full-table reads."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from casbin_table_adapter.codec import ID_ATTR, TYPE_ATTR, Record, field_attr

if TYPE_CHECKING:
    from casbin_table_adapter.tables.base import Table

logger = logging.getLogger(__name__)

_AND = " AND "
_EQ = " = "


@dataclass(frozen=True)
class ScanFilter:
    """An equality-only conjunction in DynamoDB filter-expression syntax.

    Attributes:
        expression: e.g. ``"#pType = :pType AND #v0 = :v0"``.
        names:      Placeholder to attribute name, e.g. ``{"#v0": "v0"}``.
        values:     Placeholder to expected value, e.g. ``{":v0": "alice"}``.
    """

    expression: str
    names: dict[str, str] = field(default_factory=dict)
    values: dict[str, str] = field(default_factory=dict)

    def conditions(self) -> Iterator[tuple[str, str]]:
        """Yield ``(attribute, value)`` pairs the expression requires."""
        for clause in self.expression.split(_AND):
            name_ph, value_ph = (part.strip() for part in clause.split(_EQ, 1))
            yield self.names[name_ph], self.values[value_ph]

    def matches(self, record: Mapping[str, str]) -> bool:
        """Return ``True`` if *record* satisfies every condition."""
        return all(record.get(attr) == value for attr, value in self.conditions())


def build_prefix_filter(
    ptype: str,
    field_index: int,
    field_values: Sequence[str],
) -> ScanFilter:
    """Build a filter matching *ptype* and the given field values.

    ``field_values[pos]`` is compared against attribute
    ``v{field_index + pos}``.  Empty values match anything at that
    position and add no condition.
    """
    clauses = [f"#{TYPE_ATTR} = :{TYPE_ATTR}"]
    names = {f"#{TYPE_ATTR}": TYPE_ATTR}
    values = {f":{TYPE_ATTR}": ptype}

    for pos, value in enumerate(field_values):
        if not value:
            continue
        key = field_attr(field_index + pos)
        clauses.append(f"#{key} = :{key}")
        names[f"#{key}"] = key
        values[f":{key}"] = value

    return ScanFilter(expression=_AND.join(clauses), names=names, values=values)


async def scan_all(table: Table, scan_filter: ScanFilter | None = None) -> AsyncIterator[Record]:
    """Yield every record in *table*, optionally restricted by *scan_filter*.

    Single pass; pagination is handled by the table backend.
    """
    count = 0
    async for record in table.scan(scan_filter):
        count += 1
        yield record
    logger.debug("Scan returned %d records", count)


async def collect_ids(table: Table, scan_filter: ScanFilter | None = None) -> list[str]:
    """Drain a scan and return the ``id`` of every matching record."""
    ids: list[str] = []
    async for record in scan_all(table, scan_filter):
        record_id = record.get(ID_ATTR)
        if not record_id:
            logger.warning("Skipping record without an id: %r", record)
            continue
        ids.append(record_id)
    return ids
