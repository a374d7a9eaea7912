"""
Authenticated revocation of access tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from token_gate.clients.errors import StoreConflictError, StoreError
from token_gate.core.logging import redact_token
from token_gate.models import format_timestamp
from token_gate.services.caller_credentials import (
    CallerAuthenticationError,
    CallerCredentialService,
    CallerIdentity,
)
from token_gate.services.outcomes import GateOutcome
from token_gate.services.token_schema import InvalidRecordSchemaError, validate_record
from token_gate.services.token_store import TokenStore
from token_gate.services.verification import Clock, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RevocationResult:
    outcome: GateOutcome
    revoked_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.outcome.is_success


class RevocationHandler:
    """Flag a record as revoked on behalf of the owner that holds it."""

    def __init__(
        self,
        store: TokenStore,
        credentials: Optional[CallerCredentialService],
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._credentials = credentials
        self._clock = clock

    def authenticate(
        self, authorization: Optional[str]
    ) -> Union[CallerIdentity, RevocationResult]:
        """Resolve the caller, or the failed result to answer with."""
        if self._credentials is None:
            logger.error("Revocation requested but no caller credential secret is configured")
            return RevocationResult(GateOutcome.VERIFICATION_FAILED)
        try:
            return self._credentials.authenticate(authorization)
        except CallerAuthenticationError as exc:
            logger.info("Rejecting revocation: %s", exc)
            return RevocationResult(GateOutcome.UNAUTHORIZED)

    async def revoke(
        self,
        token: Optional[str],
        owner_id: Optional[str],
        authorization: Optional[str],
    ) -> RevocationResult:
        caller = self.authenticate(authorization)
        if isinstance(caller, RevocationResult):
            return caller

        token = (token or "").strip()
        owner_id = (owner_id or "").strip()
        if not token:
            return RevocationResult(GateOutcome.MISSING_TOKEN)
        if not owner_id:
            return RevocationResult(GateOutcome.MISSING_OWNER)

        if caller.owner_id != owner_id:
            logger.warning(
                "Caller %s attempted to revoke token %s owned by %s",
                caller.owner_id,
                redact_token(token),
                owner_id,
            )
            return RevocationResult(GateOutcome.FORBIDDEN)

        try:
            item = await self._store.get_exact(owner_id, token)
            if item is None:
                logger.info("Revocation target %s not found", redact_token(token))
                return RevocationResult(GateOutcome.NOT_FOUND)
            try:
                validate_record(item, expected_owner=caller.owner_id)
            except InvalidRecordSchemaError as exc:
                logger.info(
                    "Revocation target %s unusable: %s", redact_token(token), exc
                )
                return RevocationResult(GateOutcome.NOT_FOUND)

            revoked_at = self._clock()
            updated = dict(item)
            updated["is_revoked"] = True
            updated["revoked_at"] = format_timestamp(revoked_at)
            await self._store.replace(updated)
        except StoreConflictError:
            logger.info(
                "Revocation target %s disappeared before it could be updated",
                redact_token(token),
            )
            return RevocationResult(GateOutcome.NOT_FOUND)
        except StoreError:
            logger.exception("Token revocation failed for %s", redact_token(token))
            return RevocationResult(GateOutcome.VERIFICATION_FAILED)

        logger.info("Token %s revoked by owner %s", redact_token(token), owner_id)
        return RevocationResult(GateOutcome.SUCCESS, revoked_at=revoked_at)


__all__ = ["RevocationHandler", "RevocationResult"]
