"""
Best-effort deletion of token records observed expired.
"""

from __future__ import annotations

import asyncio
import logging

from token_gate.clients.errors import StoreError
from token_gate.core.logging import redact_token
from token_gate.services.token_store import TokenStore

logger = logging.getLogger(__name__)


class CleanupSweeper:
    """Schedule fire-and-forget deletes without holding up the response."""

    def __init__(self, store: TokenStore) -> None:
        self._store = store
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, owner_id: str, token: str) -> asyncio.Task:
        """Start deleting an expired record in the background."""
        task = asyncio.create_task(self.sweep(owner_id, token))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def sweep(self, owner_id: str, token: str) -> bool:
        """Delete one record, swallowing "already gone" and store failures."""
        try:
            removed = await self._store.delete_exact(owner_id, token)
        except StoreError as exc:
            logger.warning(
                "Failed to clean up expired token %s for owner %s: %s",
                redact_token(token),
                owner_id,
                exc,
            )
            return False
        if removed:
            logger.info("Cleaned up expired token %s for owner %s", redact_token(token), owner_id)
        else:
            logger.debug("Expired token %s was already removed", redact_token(token))
        return removed

    async def wait_idle(self) -> None:
        """Wait for every scheduled sweep to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["CleanupSweeper"]
