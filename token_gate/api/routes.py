"""
FastAPI routes for the token verification and revocation gate.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import ValidationError

from token_gate.core.logging import redact_token
from token_gate.dependencies import (
    get_response_formatter,
    get_revocation_handler,
    get_verification_engine,
)
from token_gate.schemas import RevokeTokenRequest, VerifyTokenRequest
from token_gate.services import GateOutcome, ResponseStyle, RevocationResult

router = APIRouter()
logger = logging.getLogger(__name__)

_REVOKE_METHODS = ("POST", "OPTIONS")


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    return json.loads(raw or b"null")


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.options("/verify-token")
async def verify_token_preflight(
    request: Request,
    formatter: Annotated[Any, Depends(get_response_formatter)],
) -> Response:
    """Answer CORS preflight probes without touching the token store."""
    return formatter.preflight(request.headers.get("origin"))


@router.get("/verify-token")
async def verify_token_link(
    request: Request,
    engine: Annotated[Any, Depends(get_verification_engine)],
    formatter: Annotated[Any, Depends(get_response_formatter)],
    token: str | None = Query(default=None, description="Access token from the link."),
    owner_id: str | None = Query(
        default=None, description="Owner partition the token was issued under."
    ),
    redirect: str | None = Query(
        default=None, description="Optional destination override."
    ),
) -> Response:
    """Direct-link verification: every outcome is answered with a redirect."""
    logger.info(
        "Link verification for token %s (owner %s)", redact_token(token), owner_id or "missing"
    )
    result = await engine.verify(token, owner_id, redirect)
    return await formatter.verification_response(
        result,
        style=ResponseStyle.REDIRECT,
        request_origin=request.headers.get("origin"),
    )


@router.post("/verify-token")
async def verify_token_api(
    request: Request,
    engine: Annotated[Any, Depends(get_verification_engine)],
    formatter: Annotated[Any, Depends(get_response_formatter)],
) -> Response:
    """Programmatic verification: every outcome is answered with JSON."""
    origin = request.headers.get("origin")
    try:
        payload = VerifyTokenRequest.model_validate(await _read_json(request) or {})
    except (ValueError, ValidationError):
        logger.info("Rejecting verification request with malformed JSON body")
        return formatter.error_response(
            GateOutcome.INVALID_REQUEST, style=ResponseStyle.JSON, request_origin=origin
        )

    result = await engine.verify(payload.token, payload.owner_id, payload.redirect_url)
    return await formatter.verification_response(
        result, style=ResponseStyle.JSON, request_origin=origin
    )


@router.options("/revoke-token")
async def revoke_token_preflight(
    request: Request,
    formatter: Annotated[Any, Depends(get_response_formatter)],
) -> Response:
    return formatter.preflight(request.headers.get("origin"), _REVOKE_METHODS)


@router.post("/revoke-token")
async def revoke_token(
    request: Request,
    handler: Annotated[Any, Depends(get_revocation_handler)],
    formatter: Annotated[Any, Depends(get_response_formatter)],
) -> Response:
    """Flag a token as revoked on behalf of its authenticated owner."""
    origin = request.headers.get("origin")
    authorization = request.headers.get("authorization")
    caller = handler.authenticate(authorization)
    if isinstance(caller, RevocationResult):
        return formatter.revocation_response(caller, request_origin=origin)

    try:
        payload = RevokeTokenRequest.model_validate(await _read_json(request) or {})
    except (ValueError, ValidationError):
        logger.info("Rejecting revocation request with malformed JSON body")
        return formatter.revocation_response(
            RevocationResult(GateOutcome.INVALID_REQUEST), request_origin=origin
        )

    result = await handler.revoke(payload.token, payload.owner_id, authorization)
    return formatter.revocation_response(result, request_origin=origin)


__all__ = ["router"]
