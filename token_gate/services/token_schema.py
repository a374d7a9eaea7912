"""Validation of raw store items against the current token schema."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import ValidationError

from token_gate.models import AccessTokenRecord

REQUIRED_FIELDS = ("target_url", "expires_at", "owner_id")


class InvalidRecordSchemaError(Exception):
    """Raised when a stored item is not a usable token record."""

    def __init__(self, message: str, *, missing_fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing_fields = missing_fields


def missing_fields(item: Dict[str, Any]) -> tuple[str, ...]:
    """Return the required fields absent (or empty) on an item."""
    return tuple(field for field in REQUIRED_FIELDS if not item.get(field))


def validate_record(
    item: Dict[str, Any], *, expected_owner: Optional[str] = None
) -> AccessTokenRecord:
    """
    Convert a raw item into an ``AccessTokenRecord``.

    Legacy or partial items, unparseable timestamps, and items whose
    ``owner_id`` disagrees with the partition they were read from are rejected.
    """
    absent = missing_fields(item)
    if absent:
        raise InvalidRecordSchemaError(
            f"Token record missing required fields: {', '.join(absent)}",
            missing_fields=absent,
        )

    partition = item.get("pk")
    if partition is not None and partition != item["owner_id"]:
        raise InvalidRecordSchemaError("Token record owner does not match its partition.")
    if expected_owner is not None and item["owner_id"] != expected_owner:
        raise InvalidRecordSchemaError("Token record owner does not match the request.")

    try:
        return AccessTokenRecord.from_item(item)
    except ValidationError as exc:
        raise InvalidRecordSchemaError(f"Token record failed validation: {exc}") from exc


__all__ = [
    "InvalidRecordSchemaError",
    "REQUIRED_FIELDS",
    "missing_fields",
    "validate_record",
]
