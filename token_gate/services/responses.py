"""
Turn verification and revocation results into HTTP responses.

The response style follows the transport the caller used (a direct link
prefers redirects, a programmatic call prefers JSON), never the outcome.
"""

from __future__ import annotations

import hashlib
import logging
from email.utils import format_datetime
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Iterable, Optional

from fastapi import Response
from fastapi.responses import JSONResponse, RedirectResponse

from token_gate.core.config import GateSettings
from token_gate.models import format_timestamp
from token_gate.services.content_proxy import ContentFetchError, ContentProxy
from token_gate.services.outcomes import GateOutcome
from token_gate.services.redirects import RedirectResolver, append_query
from token_gate.services.revocation import RevocationResult
from token_gate.services.token_checks import remaining_seconds
from token_gate.services.verification import VerificationResult

logger = logging.getLogger(__name__)

ALLOWED_HEADERS = "Content-Type, Accept, Authorization, X-Requested-With, X-Request-ID"
NO_CACHE = "no-cache, no-store, must-revalidate"


def _etag(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:32]


class ResponseStyle(str, Enum):
    REDIRECT = "redirect"
    JSON = "json"


class ResponseFormatter:
    """Build redirect or JSON responses carrying negotiated CORS headers."""

    def __init__(
        self,
        settings: GateSettings,
        resolver: RedirectResolver,
        content_proxy: Optional[ContentProxy] = None,
    ) -> None:
        self._settings = settings
        self._resolver = resolver
        self._proxy = content_proxy
        self._cors_origins = frozenset(settings.allowed_origins) | frozenset(
            settings.local_dev_origins
        )

    def allowed_origin(self, request_origin: Optional[str]) -> str:
        """Echo a recognised origin, otherwise answer with the primary one."""
        if request_origin and request_origin in self._cors_origins:
            return request_origin
        return self._settings.primary_origin

    def cors_headers(
        self,
        request_origin: Optional[str],
        methods: Iterable[str] = ("POST", "GET", "OPTIONS"),
    ) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allowed_origin(request_origin),
            "Access-Control-Allow-Methods": ", ".join(methods),
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Allow-Credentials": "false",
            "Vary": "Origin",
            "Cache-Control": NO_CACHE,
            "Pragma": "no-cache",
            "Expires": "0",
        }

    def preflight(
        self,
        request_origin: Optional[str],
        methods: Iterable[str] = ("POST", "GET", "OPTIONS"),
    ) -> Response:
        return Response(
            status_code=HTTPStatus.OK, headers=self.cors_headers(request_origin, methods)
        )

    def failure_redirect_url(self, outcome: GateOutcome) -> str:
        return append_query(self._settings.failure_url, {"reason": outcome.reason})

    def error_response(
        self,
        outcome: GateOutcome,
        *,
        style: ResponseStyle,
        request_origin: Optional[str],
        extra: Optional[Dict[str, Any]] = None,
    ) -> Response:
        headers = self.cors_headers(request_origin)
        if style is ResponseStyle.REDIRECT:
            return RedirectResponse(
                url=self.failure_redirect_url(outcome),
                status_code=HTTPStatus.FOUND,
                headers=headers,
            )
        body: Dict[str, Any] = {
            "success": False,
            "error": outcome.reason,
            "message": outcome.message,
        }
        if extra:
            body.update(extra)
        return JSONResponse(content=body, status_code=outcome.status_code, headers=headers)

    async def verification_response(
        self,
        result: VerificationResult,
        *,
        style: ResponseStyle,
        request_origin: Optional[str],
    ) -> Response:
        if not result.success:
            extra = None
            if result.outcome is GateOutcome.EXPIRED and result.record is not None:
                extra = {"expiresAt": format_timestamp(result.record.expires_at)}
            return self.error_response(
                result.outcome, style=style, request_origin=request_origin, extra=extra
            )

        headers = self.cors_headers(request_origin)
        if style is ResponseStyle.JSON:
            body: Dict[str, Any] = {
                "success": True,
                "valid": True,
                **result.success_payload(),
                "message": result.outcome.message,
            }
            if result.legacy_scan:
                body["legacyScan"] = True
            return JSONResponse(content=body, status_code=HTTPStatus.OK, headers=headers)

        if result.record is None or result.token is None:
            raise ValueError("Successful verifications must carry a record and token.")
        resolved = self._resolver.resolve(
            result.record,
            token=result.token,
            requested_redirect=result.requested_redirect,
        )
        if self._proxy is not None:
            proxied = await self._proxied_response(result, resolved.url, headers)
            if proxied is not None:
                return proxied
        return RedirectResponse(
            url=resolved.url, status_code=HTTPStatus.FOUND, headers=headers
        )

    async def _proxied_response(
        self, result: VerificationResult, url: str, headers: Dict[str, str]
    ) -> Optional[Response]:
        try:
            content = await self._proxy.fetch(url)
        except ContentFetchError as exc:
            logger.warning("Serving redirect instead of proxied content: %s", exc)
            return None

        record = result.record
        max_age = max(int(remaining_seconds(record, result.checked_at)), 0)
        cache_headers = dict(headers)
        cache_headers.pop("Pragma", None)
        cache_headers.update(
            {
                "Cache-Control": f"private, max-age={max_age}, must-revalidate",
                "Expires": format_datetime(record.expires_at, usegmt=True),
                "ETag": f'"{_etag(result.token)}"',
            }
        )
        return Response(
            content=content.body,
            status_code=HTTPStatus.OK,
            media_type=content.media_type,
            headers=cache_headers,
        )

    def revocation_response(
        self, result: RevocationResult, *, request_origin: Optional[str]
    ) -> Response:
        methods = ("POST", "OPTIONS")
        headers = self.cors_headers(request_origin, methods)
        if not result.success:
            return JSONResponse(
                content={
                    "success": False,
                    "error": result.outcome.reason,
                    "message": result.outcome.message,
                },
                status_code=result.outcome.status_code,
                headers=headers,
            )
        return JSONResponse(
            content={
                "success": True,
                "message": "Token successfully revoked",
                "revokedAt": format_timestamp(result.revoked_at),
            },
            status_code=HTTPStatus.OK,
            headers=headers,
        )


__all__ = ["ResponseFormatter", "ResponseStyle"]
