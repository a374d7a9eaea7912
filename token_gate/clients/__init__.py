"""Expose token table backends."""

from .dynamodb import DynamoDBTokenTable
from .errors import StoreConflictError, StoreError, StoreUnavailableError
from .sqlite_store import SQLiteTokenTable

__all__ = [
    "DynamoDBTokenTable",
    "SQLiteTokenTable",
    "StoreConflictError",
    "StoreError",
    "StoreUnavailableError",
]
