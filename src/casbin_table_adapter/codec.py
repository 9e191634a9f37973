"""Record codec — policy lines to flat table records and back.

A policy line is a ``(ptype, fields)`` pair such as
``("p", ["alice", "data1", "read"])``.  It is stored as a flat mapping::

    {"id": "<md5 hex>", "pType": "p", "v0": "alice", "v1": "data1", "v2": "read"}

The ``id`` is derived from the line alone, so a record can be deleted
without reading it first.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence

Record = dict[str, str]

FIELD_COUNT = 6
ID_ATTR = "id"
TYPE_ATTR = "pType"


def field_attr(index: int) -> str:
    """Return the attribute name holding field *index* (``v0`` .. ``v5``)."""
    return f"v{index}"


def derive_id(ptype: str, fields: Sequence[str]) -> str:
    """Return the record id for a policy line.

    The type label and every supplied field (empty ones included) are
    joined with commas and hashed with MD5.  Fields past ``FIELD_COUNT``
    are ignored.
    """
    line = ptype + "".join(f",{value}" for value in fields[:FIELD_COUNT])
    return hashlib.md5(line.encode("utf-8")).hexdigest()


def encode(ptype: str, fields: Sequence[str]) -> Record:
    """Build the stored record for a policy line.

    Empty field values are not stored; the id still accounts for them.
    """
    record: Record = {TYPE_ATTR: ptype}
    for index, value in enumerate(fields[:FIELD_COUNT]):
        if value:
            record[field_attr(index)] = value
    record[ID_ATTR] = derive_id(ptype, fields)
    return record


def decode(record: Mapping[str, str]) -> tuple[str, list[str]]:
    """Rebuild ``(ptype, fields)`` from a stored record.

    Fields are read from ``v0`` upwards and reading stops at the first
    missing attribute, so a record with ``v0`` and ``v2`` but no ``v1``
    decodes to a single field.  Never raises; a record without ``pType``
    decodes to an empty type.
    """
    ptype = record.get(TYPE_ATTR, "")
    fields: list[str] = []
    for index in range(FIELD_COUNT):
        value = record.get(field_attr(index))
        if value is None:
            break
        fields.append(value)
    return ptype, fields
