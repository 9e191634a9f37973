# Copyright (c) 2024 casbin-table-adapter contributors
# SPDX-License-Identifier: Apache-2.0
"""Table factory for creating backends and adapters from configuration.

Uses the Registry pattern to map type strings to table builders,
allowing extensibility without modifying factory code.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from pydantic import ValidationError

from casbin_table_adapter.adapter import TableAdapter
from casbin_table_adapter.config import AdapterConfig, TableConfig
from casbin_table_adapter.exceptions import ConfigError
from casbin_table_adapter.tables import InMemoryTable, SQLiteTable, Table

TableBuilder = Callable[[TableConfig, int], Table]


def _build_memory(config: TableConfig, batch_size: int) -> Table:
    return InMemoryTable(max_batch_size=batch_size)


def _build_sqlite(config: TableConfig, batch_size: int) -> Table:
    return SQLiteTable(
        db_path=config.path,
        table_name=config.table_name,
        max_batch_size=batch_size,
    )


def _build_dynamodb(config: TableConfig, batch_size: int) -> Table:
    # Deferred so the aioboto3 extra is only needed when selected.
    from casbin_table_adapter.tables.dynamodb import DynamoDBTable

    return DynamoDBTable(
        config.table_name,
        region_name=config.region_name,
        endpoint_url=config.endpoint_url,
    )


class TableFactory:
    """Creates table backends from configuration.

    Backend types are registered at class level and can be extended via
    the `register` class method.

    Example:
        TableFactory.register("redis", build_redis_table)
        table = TableFactory.create(AdapterConfig(table=TableConfig(type="redis")))
    """

    _registry: ClassVar[dict[str, TableBuilder]] = {
        "memory": _build_memory,
        "sqlite": _build_sqlite,
        "dynamodb": _build_dynamodb,
    }

    @classmethod
    def register(cls, type_name: str, builder: TableBuilder) -> None:
        """Register a custom table type.

        Args:
            type_name: Type string to use in configuration
            builder: Callable receiving the table config and batch size
        """
        cls._registry[type_name] = builder

    @classmethod
    def registered_types(cls) -> list[str]:
        """Return list of registered table type names."""
        return list(cls._registry.keys())

    @classmethod
    def create(cls, config: AdapterConfig) -> Table:
        """Build the table described by *config*.

        Raises:
            ConfigError: If the type is unknown or the backend rejects the
                configuration
        """
        builder = cls._registry.get(config.table.type)
        if builder is None:
            available = ", ".join(sorted(cls.registered_types()))
            raise ConfigError(
                f"Unknown table type: '{config.table.type}'. Available types: {available}"
            )
        try:
            return builder(config.table, config.batch_size)
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Failed to create table of type '{config.table.type}': {e}") from e


def create_adapter(config: AdapterConfig | dict[str, Any] | None = None) -> TableAdapter:
    """Build a :class:`TableAdapter` from *config* (defaults to in-memory).

    Raises:
        ConfigError: If the configuration is invalid
    """
    if not isinstance(config, AdapterConfig):
        try:
            config = AdapterConfig.model_validate(config or {})
        except ValidationError as e:
            raise ConfigError(f"Invalid adapter configuration: {e}") from e

    return TableAdapter(TableFactory.create(config), batch_size=config.batch_size)
