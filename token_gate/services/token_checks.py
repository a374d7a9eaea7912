"""Pure revocation and expiration decisions over a validated record."""

from __future__ import annotations

import math
from datetime import datetime

from token_gate.models import AccessTokenRecord
from token_gate.models.access_token import ensure_utc
from token_gate.services.outcomes import GateOutcome


def is_expired(record: AccessTokenRecord, now: datetime) -> bool:
    """A record expires strictly after its ``expires_at`` instant."""
    return record.expires_at < ensure_utc(now)


def check_record(record: AccessTokenRecord, now: datetime) -> GateOutcome:
    """Revocation wins over expiry; anything else is a success."""
    if record.is_revoked:
        return GateOutcome.REVOKED
    if is_expired(record, now):
        return GateOutcome.EXPIRED
    return GateOutcome.SUCCESS


def remaining_seconds(record: AccessTokenRecord, now: datetime) -> float:
    return (record.expires_at - ensure_utc(now)).total_seconds()


def remaining_minutes(record: AccessTokenRecord, now: datetime) -> int:
    """Whole minutes until expiry, rounding half up."""
    return int(math.floor(remaining_seconds(record, now) / 60 + 0.5))


__all__ = ["check_record", "is_expired", "remaining_minutes", "remaining_seconds"]
