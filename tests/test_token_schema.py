try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import timedelta

import pytest

from conftest import NOW, TOKEN, make_item
from token_gate.models import AccessTokenRecord
from token_gate.services.token_checks import check_record, remaining_minutes
from token_gate.services.outcomes import GateOutcome
from token_gate.services.token_schema import InvalidRecordSchemaError, validate_record


def test_validate_record_parses_store_layout() -> None:
    record = validate_record(make_item(expires_at=NOW), expected_owner="t1")

    assert record.owner_id == "t1"
    assert record.token == TOKEN
    assert record.expires_at == NOW
    assert record.is_revoked is False


def test_validate_record_accepts_zulu_timestamps() -> None:
    item = make_item()
    item["expires_at"] = "2026-03-01T13:00:00.000Z"

    assert validate_record(item).expires_at == NOW + timedelta(hours=1)


@pytest.mark.parametrize(
    "mutation",
    [
        {"target_url": ""},
        {"expires_at": None},
        {"expires_at": "next tuesday"},
        {"owner_id": "someone-else"},
    ],
)
def test_validate_record_rejects_unusable_items(mutation) -> None:
    item = make_item()
    item.update(mutation)

    with pytest.raises(InvalidRecordSchemaError):
        validate_record(item)


def test_validate_record_rejects_owner_mismatch_with_request() -> None:
    with pytest.raises(InvalidRecordSchemaError):
        validate_record(make_item(), expected_owner="t9")


def test_record_round_trips_to_store_item() -> None:
    record = AccessTokenRecord.from_item(make_item())

    assert AccessTokenRecord.from_item(record.to_item()) == record


def test_check_record_orders_revocation_before_expiry() -> None:
    record = AccessTokenRecord.from_item(
        make_item(expires_at=NOW - timedelta(hours=1), is_revoked=True)
    )

    assert check_record(record, NOW) is GateOutcome.REVOKED


def test_remaining_minutes_rounds_half_up() -> None:
    record = AccessTokenRecord.from_item(
        make_item(expires_at=NOW + timedelta(minutes=2, seconds=30))
    )

    assert remaining_minutes(record, NOW) == 3
    assert check_record(record, NOW) is GateOutcome.SUCCESS
