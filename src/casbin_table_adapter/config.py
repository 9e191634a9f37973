# Copyright (c) 2024 casbin-table-adapter contributors
# SPDX-License-Identifier: Apache-2.0
"""Configuration models for building tables and adapters.

Plain pydantic models, so configuration can come from a dict, a JSON
document (``AdapterConfig.model_validate_json``) or keyword arguments.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from casbin_table_adapter.batching import MAX_BATCH_SIZE


class TableConfig(BaseModel):
    """Where policy records live.

    Attributes:
        type:         Backend name ("memory", "sqlite", "dynamodb", or a
                      name registered with ``TableFactory.register``)
        table_name:   Table holding the records
        path:         SQLite database file (sqlite only)
        region_name:  AWS region (dynamodb only)
        endpoint_url: Endpoint override, e.g. DynamoDB Local (dynamodb only)
    """

    type: str = "memory"
    table_name: str = "casbin_policies"
    path: str = "casbin_policies.db"
    region_name: str | None = None
    endpoint_url: str | None = None


class AdapterConfig(BaseModel):
    """Adapter settings.

    Attributes:
        table:      Table backend configuration
        batch_size: Operations sent per batch write
    """

    table: TableConfig = Field(default_factory=TableConfig)
    batch_size: int = Field(default=MAX_BATCH_SIZE, ge=1)

    @model_validator(mode="after")
    def _check_batch_size(self) -> AdapterConfig:
        if self.table.type == "dynamodb" and self.batch_size > MAX_BATCH_SIZE:
            raise ValueError(
                f"batch_size {self.batch_size} exceeds DynamoDB's limit of {MAX_BATCH_SIZE}"
            )
        return self
