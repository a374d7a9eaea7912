"""
Optional transport strategy that serves the target page body directly.

The verification engine never fetches content; the response formatter uses
this only for redirect-style successes when proxying is enabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


class ContentFetchError(Exception):
    """Raised when the target content cannot be fetched."""


@dataclass(frozen=True, slots=True)
class ProxiedContent:
    body: str
    media_type: str


class ContentProxy:
    """Fetch an already-vetted destination URL with a bounded timeout."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout_seconds
        self._transport = transport

    async def fetch(self, url: str) -> ProxiedContent:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ContentFetchError(f"Failed to fetch target content: {exc}") from exc

        media_type = response.headers.get("content-type", "text/html").split(";")[0]
        return ProxiedContent(body=response.text, media_type=media_type or "text/html")


__all__ = ["ContentFetchError", "ContentProxy", "ProxiedContent"]
