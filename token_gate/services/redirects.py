"""
Resolve and sanitize the destination of a successful verification.

Only destinations whose origin matches a configured allowed origin are
honoured; anything else is replaced by the configured safe default.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, unquote_plus, urlencode, urlsplit, urlunsplit

from token_gate.core.config import GateSettings
from token_gate.models import AccessTokenRecord, format_timestamp

logger = logging.getLogger(__name__)

INVALID_TARGET = "invalid_target_url"
UNTRUSTED_TARGET = "untrusted_target_url"

_DEFAULT_PORTS = {"http": 80, "https": 443}
_CLAIM_KEYS = ("validated_token", "owner_id", "expires_at", "error")


class UnsafeURLError(ValueError):
    """Raised when a URL is not an absolute http(s) URL safe to redirect to."""


@dataclass(frozen=True, slots=True)
class Origin:
    scheme: str
    host: str
    port: int
    path: str = ""

    def permits(self, other: "Origin") -> bool:
        """Same scheme, host and port, with ``other`` inside this path."""
        if (self.scheme, self.host, self.port) != (other.scheme, other.host, other.port):
            return False
        if not self.path:
            return True
        return other.path == self.path or other.path.startswith(f"{self.path}/")


def _normalize_path(path: str) -> str:
    """Decode and collapse dot segments the way a browser resolves them."""
    decoded = unquote(path)
    if not decoded:
        return ""
    return posixpath.normpath(decoded).rstrip("/")


def parse_origin(url: str) -> Origin:
    """Split an absolute URL into its normalized origin and path."""
    if not url or any(char in url for char in ("\\", "\r", "\n", "\t", " ")):
        raise UnsafeURLError(f"Malformed URL: {url!r}")
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise UnsafeURLError(f"Malformed URL: {url!r}") from exc

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise UnsafeURLError(f"Unsupported scheme in {url!r}")
    if not parts.netloc or "@" in parts.netloc or not parts.hostname:
        raise UnsafeURLError(f"Missing or ambiguous host in {url!r}")
    return Origin(
        scheme=scheme,
        host=parts.hostname.lower().rstrip("."),
        port=port or _DEFAULT_PORTS[scheme],
        path=_normalize_path(parts.path),
    )


@dataclass(frozen=True, slots=True)
class ResolvedRedirect:
    url: str
    fallback_used: bool = False
    error: Optional[str] = None


class RedirectResolver:
    """Pick, vet and annotate the URL a verified caller is sent to."""

    def __init__(self, settings: GateSettings) -> None:
        self._settings = settings
        self._allowed: list[Origin] = []
        for origin in settings.allowed_origins:
            try:
                self._allowed.append(parse_origin(origin))
            except UnsafeURLError:
                logger.warning("Ignoring unparseable allowed origin %r", origin)
        self._fallback = settings.safe_fallback_url

    def is_allowed(self, url: str) -> bool:
        try:
            candidate = parse_origin(url)
        except UnsafeURLError:
            return False
        return any(allowed.permits(candidate) for allowed in self._allowed)

    def resolve(
        self,
        record: AccessTokenRecord,
        *,
        token: str,
        requested_redirect: Optional[str] = None,
    ) -> ResolvedRedirect:
        candidate = requested_redirect or record.target_url
        error: Optional[str] = None
        try:
            parse_origin(candidate)
        except UnsafeURLError as exc:
            logger.warning("Invalid redirect target, using fallback: %s", exc)
            error = INVALID_TARGET
        else:
            if not self.is_allowed(candidate):
                logger.warning(
                    "Redirect target %r is outside the allowed origins, using fallback",
                    candidate,
                )
                error = UNTRUSTED_TARGET

        destination = self._fallback if error else candidate
        claims = {
            "validated_token": token,
            "owner_id": record.owner_id,
            "expires_at": format_timestamp(record.expires_at),
        }
        if error:
            claims["error"] = error
        return ResolvedRedirect(
            url=append_query(destination, claims),
            fallback_used=error is not None,
            error=error,
        )


def _query_key(segment: str) -> str:
    return unquote_plus(segment.partition("=")[0])


def append_query(url: str, params: dict[str, str]) -> str:
    """Append query parameters to a URL, dropping any existing claim keys.

    Other parameters are kept byte for byte.
    """
    parts = urlsplit(url)
    kept = [
        segment
        for segment in parts.query.split("&")
        if segment and _query_key(segment) not in (*params, *_CLAIM_KEYS)
    ]
    kept.append(urlencode(params))
    return urlunsplit(parts._replace(query="&".join(kept)))


__all__ = [
    "INVALID_TARGET",
    "Origin",
    "RedirectResolver",
    "ResolvedRedirect",
    "UNTRUSTED_TARGET",
    "UnsafeURLError",
    "append_query",
    "parse_origin",
]
