"""DynamoDBTable — hosted table backend using aioboto3."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any

try:
    import aioboto3
    from botocore.exceptions import BotoCoreError, ClientError
except ImportError as exc:
    raise ImportError(
        "DynamoDBTable requires the 'aioboto3' package. "
        "Install it with: pip install casbin-table-adapter[dynamodb]"
    ) from exc

from casbin_table_adapter.batching import MAX_BATCH_SIZE
from casbin_table_adapter.codec import ID_ATTR, Record
from casbin_table_adapter.exceptions import StoreError
from casbin_table_adapter.tables.base import Table, record_key

if TYPE_CHECKING:
    from casbin_table_adapter.batching import WriteOp
    from casbin_table_adapter.query import ScanFilter

logger = logging.getLogger(__name__)

_CLIENT_ERRORS = (BotoCoreError, ClientError)


class DynamoDBTable(Table):
    """Table backed by a DynamoDB table with a string ``id`` hash key.

    Uses the low-level client, so every attribute is marshalled as
    ``{"S": value}``.  Retries and backoff are left to botocore's own
    retry configuration.

    Parameters:
        table_name:   DynamoDB table name.
        client:       An already-open aiobotocore DynamoDB client.  When
                      omitted, one is opened lazily from an
                      ``aioboto3.Session`` and closed by :meth:`close`.
        region_name:  AWS region for the lazily opened client.
        endpoint_url: Override endpoint (e.g. DynamoDB Local on
                      ``http://localhost:8000``).
    """

    max_batch_size = MAX_BATCH_SIZE

    def __init__(
        self,
        table_name: str,
        *,
        client: Any = None,
        region_name: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        self.table_name = table_name
        self._client = client
        self._region_name = region_name
        self._endpoint_url = endpoint_url
        self._exit_stack: AsyncExitStack | None = None

    async def _connect(self) -> Any:
        if self._client is None:
            stack = AsyncExitStack()
            session = aioboto3.Session()
            try:
                self._client = await stack.enter_async_context(
                    session.client(
                        "dynamodb",
                        region_name=self._region_name,
                        endpoint_url=self._endpoint_url,
                    )
                )
            except _CLIENT_ERRORS as exc:
                await stack.aclose()
                raise StoreError("connect", str(exc)) from exc
            self._exit_stack = stack
        return self._client

    async def close(self) -> None:
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
            self._exit_stack = None
            self._client = None

    # ── Table protocol ───────────────────────────────────────

    async def scan(self, scan_filter: ScanFilter | None = None) -> AsyncIterator[Record]:
        client = await self._connect()
        kwargs: dict[str, Any] = {"TableName": self.table_name}
        if scan_filter is not None:
            kwargs["FilterExpression"] = scan_filter.expression
            kwargs["ExpressionAttributeNames"] = dict(scan_filter.names)
            kwargs["ExpressionAttributeValues"] = _marshal(scan_filter.values)

        paginator = client.get_paginator("scan")
        pages = 0
        try:
            async for page in paginator.paginate(**kwargs):
                pages += 1
                for item in page.get("Items", []):
                    yield _unmarshal(item)
        except _CLIENT_ERRORS as exc:
            raise StoreError("scan", str(exc)) from exc
        logger.debug("Scanned %s in %d pages", self.table_name, pages)

    async def put(self, record: Record) -> None:
        record_key(record, "put")
        client = await self._connect()
        try:
            await client.put_item(TableName=self.table_name, Item=_marshal(record))
        except _CLIENT_ERRORS as exc:
            raise StoreError("put", str(exc)) from exc

    async def delete(self, record_id: str, *, return_old: bool = False) -> Record | None:
        client = await self._connect()
        kwargs: dict[str, Any] = {
            "TableName": self.table_name,
            "Key": {ID_ATTR: {"S": record_id}},
        }
        if return_old:
            kwargs["ReturnValues"] = "ALL_OLD"
        try:
            response = await client.delete_item(**kwargs)
        except _CLIENT_ERRORS as exc:
            raise StoreError("delete", str(exc)) from exc

        attributes = response.get("Attributes")
        if not return_old or not attributes:
            return None
        return _unmarshal(attributes)

    async def batch_write(self, ops: list[WriteOp]) -> None:
        if len(ops) > self.max_batch_size:
            raise StoreError(
                "batch_write",
                f"{len(ops)} operations exceed the limit of {self.max_batch_size}",
            )
        client = await self._connect()
        requests = [_write_request(op) for op in ops]
        try:
            response = await client.batch_write_item(RequestItems={self.table_name: requests})
        except _CLIENT_ERRORS as exc:
            raise StoreError("batch_write", str(exc)) from exc

        unprocessed = response.get("UnprocessedItems", {}).get(self.table_name, [])
        if unprocessed:
            raise StoreError(
                "batch_write",
                f"{len(unprocessed)} of {len(ops)} operations were not processed",
            )


def _marshal(values: Mapping[str, str]) -> dict[str, dict[str, str]]:
    return {name: {"S": value} for name, value in values.items()}


def _unmarshal(item: Mapping[str, Mapping[str, Any]]) -> Record:
    # Only string attributes belong to a policy record.
    return {name: value["S"] for name, value in item.items() if "S" in value}


def _write_request(op: WriteOp) -> dict[str, Any]:
    if op.kind == "put":
        record_key(op.record, "batch_write")
        return {"PutRequest": {"Item": _marshal(op.record)}}
    return {"DeleteRequest": {"Key": {ID_ATTR: {"S": op.key}}}}
