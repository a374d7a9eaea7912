"""
Verification engine deciding whether a presented token grants access.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from token_gate.clients.errors import StoreError
from token_gate.core.logging import redact_token
from token_gate.models import AccessTokenRecord, format_timestamp
from token_gate.services.cleanup import CleanupSweeper
from token_gate.services.outcomes import GateOutcome
from token_gate.services.token_checks import check_record, remaining_minutes
from token_gate.services.token_schema import (
    InvalidRecordSchemaError,
    missing_fields,
    validate_record,
)
from token_gate.services.token_store import TokenStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of a single verification, with the record on success."""

    outcome: GateOutcome
    token: Optional[str] = None
    owner_id: Optional[str] = None
    record: Optional[AccessTokenRecord] = None
    remaining_minutes: Optional[int] = None
    requested_redirect: Optional[str] = None
    checked_at: Optional[datetime] = None
    legacy_scan: bool = False

    @property
    def success(self) -> bool:
        return self.outcome.is_success

    def success_payload(self) -> Dict[str, Any]:
        """Token metadata returned to callers when access is granted."""
        if self.record is None:
            raise ValueError("Only successful verifications carry a payload.")
        record = self.record
        return {
            "ownerId": record.owner_id,
            "targetUrl": record.target_url,
            "expiresAt": format_timestamp(record.expires_at),
            "remainingMinutes": self.remaining_minutes,
            "issuedAt": format_timestamp(record.issued_at) if record.issued_at else None,
        }


class VerificationEngine:
    """Runs the parameter, lookup, schema, revocation and expiry checks in order."""

    def __init__(
        self,
        store: TokenStore,
        sweeper: CleanupSweeper,
        *,
        clock: Clock = utc_now,
        allow_legacy_scan: bool = False,
    ) -> None:
        self._store = store
        self._sweeper = sweeper
        self._clock = clock
        self._allow_legacy_scan = allow_legacy_scan

    async def verify(
        self,
        token: Optional[str],
        owner_id: Optional[str],
        requested_redirect: Optional[str] = None,
    ) -> VerificationResult:
        token = _clean(token)
        owner_id = _clean(owner_id)
        requested_redirect = _clean(requested_redirect)

        def result(outcome: GateOutcome, **kwargs: Any) -> VerificationResult:
            kwargs.setdefault("owner_id", owner_id)
            return VerificationResult(
                outcome=outcome,
                token=token,
                requested_redirect=requested_redirect,
                **kwargs,
            )

        if token is None:
            logger.info("Rejecting verification: missing token")
            return result(GateOutcome.MISSING_TOKEN)

        legacy = False
        if owner_id is None:
            if not self._allow_legacy_scan:
                logger.info(
                    "Rejecting verification of %s: missing owner_id", redact_token(token)
                )
                return result(GateOutcome.MISSING_OWNER)
            legacy = True

        try:
            if legacy:
                item = await self._legacy_lookup(token)
            else:
                item = await self._store.get_exact(owner_id, token)
        except StoreError:
            logger.exception(
                "Token lookup failed for %s (owner %s)", redact_token(token), owner_id
            )
            return result(GateOutcome.VERIFICATION_FAILED, legacy_scan=legacy)

        if item is None:
            logger.info(
                "No token record for %s (owner %s)", redact_token(token), owner_id
            )
            return result(GateOutcome.INVALID_TOKEN, legacy_scan=legacy)

        try:
            record = validate_record(item, expected_owner=owner_id)
        except InvalidRecordSchemaError as exc:
            logger.warning(
                "Token %s rejected with invalid schema: %s", redact_token(token), exc
            )
            return result(GateOutcome.INVALID_SCHEMA, legacy_scan=legacy)

        now = self._clock()
        outcome = check_record(record, now)
        if outcome is GateOutcome.REVOKED:
            logger.info(
                "Token %s for owner %s has been revoked",
                redact_token(token),
                record.owner_id,
            )
            return result(outcome, owner_id=record.owner_id, checked_at=now, legacy_scan=legacy)

        if outcome is GateOutcome.EXPIRED:
            logger.info(
                "Token %s for owner %s expired at %s",
                redact_token(token),
                record.owner_id,
                format_timestamp(record.expires_at),
            )
            self._sweeper.schedule(record.owner_id, record.token)
            return result(
                outcome,
                owner_id=record.owner_id,
                record=record,
                checked_at=now,
                legacy_scan=legacy,
            )

        minutes = remaining_minutes(record, now)
        logger.info(
            "Token %s verified for owner %s (%s minutes remaining)",
            redact_token(token),
            record.owner_id,
            minutes,
        )
        return result(
            GateOutcome.SUCCESS,
            owner_id=record.owner_id,
            record=record,
            remaining_minutes=minutes,
            checked_at=now,
            legacy_scan=legacy,
        )

    async def _legacy_lookup(self, token: str) -> Optional[Dict[str, Any]]:
        # Deprecated: token-only matching ignores tenant isolation.
        logger.warning(
            "Legacy token-only scan used for %s; callers should send owner_id",
            redact_token(token),
        )
        candidates = [
            item
            for item in await self._store.scan_by_token(token)
            if item.get("sk") == token
        ]
        complete = [item for item in candidates if not missing_fields(item)]
        if not complete:
            return candidates[0] if candidates else None
        if len(complete) > 1:
            logger.warning(
                "Multiple records share token %s across %d owners; using most recent",
                redact_token(token),
                len(complete),
            )
        return max(complete, key=lambda item: str(item.get("issued_at") or ""))


__all__ = ["VerificationEngine", "VerificationResult", "utc_now"]
