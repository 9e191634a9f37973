"""casbin_table_adapter — Casbin policy storage for key-value tables.

Each policy line becomes one record keyed by an id derived from the line
itself.  Bulk changes are written in pages that fit the table's
batch-write limit.
"""

from casbin_table_adapter.adapter import TableAdapter
from casbin_table_adapter.config import AdapterConfig, TableConfig
from casbin_table_adapter.exceptions import (
    AdapterError,
    ConfigError,
    InvalidPolicyError,
    StoreError,
)
from casbin_table_adapter.factory import TableFactory, create_adapter
from casbin_table_adapter.filter import Filter

__all__ = [
    "AdapterConfig",
    "AdapterError",
    "ConfigError",
    "Filter",
    "InvalidPolicyError",
    "StoreError",
    "TableAdapter",
    "TableConfig",
    "TableFactory",
    "create_adapter",
]
