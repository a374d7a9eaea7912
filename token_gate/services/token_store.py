"""
Async adapter over a synchronous token table backend.

Every call runs in a worker thread under a bounded timeout and is attempted
exactly once.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

from token_gate.clients.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TokenTable(Protocol):
    def get_item(self, *, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]: ...

    def delete_item(self, *, partition_key: str, sort_key: str) -> bool: ...

    def replace_item(self, item: Dict[str, Any]) -> None: ...

    def scan_by_sort_key(self, sort_key: str) -> list[Dict[str, Any]]: ...


class TokenStore:
    """Exact-key access to token records keyed by (owner_id, token)."""

    def __init__(self, table: TokenTable, *, timeout_seconds: float) -> None:
        self._table = table
        self._timeout = timeout_seconds

    async def _call(self, operation: str, func: Callable[..., T], *args, **kwargs) -> T:
        bound = functools.partial(func, *args, **kwargs)
        try:
            return await asyncio.wait_for(asyncio.to_thread(bound), self._timeout)
        except asyncio.TimeoutError as exc:
            raise StoreUnavailableError(
                f"Token store {operation} timed out after {self._timeout}s"
            ) from exc

    async def get_exact(self, owner_id: str, token: str) -> Optional[Dict[str, Any]]:
        """Direct keyed read of a single record."""
        return await self._call(
            "get", self._table.get_item, partition_key=owner_id, sort_key=token
        )

    async def delete_exact(self, owner_id: str, token: str) -> bool:
        """Delete a record; deleting an absent record is not an error."""
        return await self._call(
            "delete", self._table.delete_item, partition_key=owner_id, sort_key=token
        )

    async def replace(self, item: Dict[str, Any]) -> None:
        """Conditionally replace an existing record."""
        await self._call("replace", self._table.replace_item, item)

    async def scan_by_token(self, token: str) -> list[Dict[str, Any]]:
        """Token-only scan across every partition. Legacy use only."""
        logger.warning("Token store performing token-only scan; this ignores owner partitions")
        return await self._call("scan", self._table.scan_by_sort_key, token)


__all__ = ["TokenStore", "TokenTable"]
