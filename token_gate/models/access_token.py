"""
Domain model for access token records persisted in the token table.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision."""
    rendered = ensure_utc(value).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp; raises ValueError when unusable."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = f"{cleaned[:-1]}+00:00"
    return ensure_utc(datetime.fromisoformat(cleaned))


class AccessTokenRecord(BaseModel):
    """Represents a token record stored in the partitioned token table."""

    model_config = ConfigDict(frozen=True)

    owner_id: str = Field(..., min_length=1, description="Partition key of the record.")
    token: str = Field(..., min_length=1, description="Row key of the record.")
    target_url: str = Field(..., min_length=1)
    expires_at: datetime
    issued_at: Optional[datetime] = None
    is_revoked: bool = False
    revoked_at: Optional[datetime] = None

    @field_validator("expires_at", mode="before")
    @classmethod
    def _parse_expiry(cls, value: Any) -> datetime:
        return parse_timestamp(value)

    @field_validator("issued_at", "revoked_at", mode="before")
    @classmethod
    def _parse_optional(cls, value: Any) -> Optional[datetime]:
        if value in (None, ""):
            return None
        return parse_timestamp(value)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "AccessTokenRecord":
        """Build a record from a raw store item."""
        return cls(
            owner_id=item.get("owner_id"),
            token=item.get("sk"),
            target_url=item.get("target_url"),
            expires_at=item.get("expires_at"),
            issued_at=item.get("issued_at"),
            is_revoked=bool(item.get("is_revoked", False)),
            revoked_at=item.get("revoked_at"),
        )

    def to_item(self) -> Dict[str, Any]:
        """Serialize the record into the store layout."""
        item: Dict[str, Any] = {
            "pk": self.owner_id,
            "sk": self.token,
            "owner_id": self.owner_id,
            "target_url": self.target_url,
            "expires_at": format_timestamp(self.expires_at),
            "is_revoked": self.is_revoked,
        }
        if self.issued_at is not None:
            item["issued_at"] = format_timestamp(self.issued_at)
        if self.revoked_at is not None:
            item["revoked_at"] = format_timestamp(self.revoked_at)
        return item


__all__ = [
    "AccessTokenRecord",
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
]
