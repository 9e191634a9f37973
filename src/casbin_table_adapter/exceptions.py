"""Custom exceptions for the casbin_table_adapter package."""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for all adapter-related errors."""


class StoreError(AdapterError):
    """Raised when a table operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class InvalidPolicyError(AdapterError):
    """Raised when a stored record cannot be turned back into a policy line."""

    def __init__(self, record_id: str | None = None) -> None:
        self.record_id = record_id
        msg = "invalid load policy"
        if record_id:
            msg += f" (record '{record_id}')"
        super().__init__(msg)


class ConfigError(AdapterError):
    """Raised when a table or adapter is misconfigured."""
