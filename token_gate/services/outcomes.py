"""Outcome vocabulary shared by verification and revocation."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus


class GateOutcome(str, Enum):
    """Every decision the gate can return, with its wire code and status."""

    SUCCESS = "success"
    MISSING_TOKEN = "missing_token"
    MISSING_OWNER = "missing_owner"
    INVALID_REQUEST = "invalid_request"
    INVALID_TOKEN = "invalid"
    INVALID_SCHEMA = "invalid_schema"
    REVOKED = "revoked"
    EXPIRED = "expired"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VERIFICATION_FAILED = "error"

    @property
    def reason(self) -> str:
        return self.value

    @property
    def status_code(self) -> HTTPStatus:
        return _STATUS[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def is_success(self) -> bool:
        return self is GateOutcome.SUCCESS


_STATUS = {
    GateOutcome.SUCCESS: HTTPStatus.OK,
    GateOutcome.MISSING_TOKEN: HTTPStatus.BAD_REQUEST,
    GateOutcome.MISSING_OWNER: HTTPStatus.BAD_REQUEST,
    GateOutcome.INVALID_REQUEST: HTTPStatus.BAD_REQUEST,
    GateOutcome.INVALID_TOKEN: HTTPStatus.UNAUTHORIZED,
    GateOutcome.INVALID_SCHEMA: HTTPStatus.UNAUTHORIZED,
    GateOutcome.REVOKED: HTTPStatus.UNAUTHORIZED,
    GateOutcome.EXPIRED: HTTPStatus.UNAUTHORIZED,
    GateOutcome.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    GateOutcome.FORBIDDEN: HTTPStatus.FORBIDDEN,
    GateOutcome.NOT_FOUND: HTTPStatus.NOT_FOUND,
    GateOutcome.VERIFICATION_FAILED: HTTPStatus.INTERNAL_SERVER_ERROR,
}

_MESSAGES = {
    GateOutcome.SUCCESS: "Token is valid - access granted",
    GateOutcome.MISSING_TOKEN: "Missing token parameter",
    GateOutcome.MISSING_OWNER: "Missing owner_id parameter - required for exact token lookup",
    GateOutcome.INVALID_REQUEST: "Invalid JSON in request body",
    GateOutcome.INVALID_TOKEN: "Invalid token - no exact match found",
    GateOutcome.INVALID_SCHEMA: "Token record is incomplete and cannot be used",
    GateOutcome.REVOKED: "Token has been revoked",
    GateOutcome.EXPIRED: "Token has expired",
    GateOutcome.UNAUTHORIZED: "Missing or invalid authorization token",
    GateOutcome.FORBIDDEN: "Caller does not own this token",
    GateOutcome.NOT_FOUND: "Token not found",
    GateOutcome.VERIFICATION_FAILED: "Failed to process token - please try again",
}


__all__ = ["GateOutcome"]
