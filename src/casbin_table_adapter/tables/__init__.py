"""Table backends for policy record persistence.

``DynamoDBTable`` lives in :mod:`casbin_table_adapter.tables.dynamodb` and
is imported on demand, since it needs the optional ``aioboto3`` extra.
"""

from casbin_table_adapter.tables.base import Table
from casbin_table_adapter.tables.memory import InMemoryTable
from casbin_table_adapter.tables.sqlite import SQLiteTable

__all__ = ["InMemoryTable", "SQLiteTable", "Table"]
