try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import timedelta

import pytest

from conftest import NOW, TOKEN, make_item
from token_gate.clients.errors import StoreUnavailableError
from token_gate.models import format_timestamp
from token_gate.services import (
    CallerCredentialService,
    GateOutcome,
    RevocationHandler,
    TokenStore,
)


@pytest.fixture
def credentials() -> CallerCredentialService:
    return CallerCredentialService(secret="revocation-secret")


def _handler(table, credentials, clock) -> RevocationHandler:
    return RevocationHandler(TokenStore(table, timeout_seconds=1.0), credentials, clock=clock)


def _bearer(credentials: CallerCredentialService, owner_id: str = "t1") -> str:
    return f"Bearer {credentials.issue(owner_id)}"


@pytest.mark.asyncio
async def test_revoke_flags_record_and_keeps_it(fake_table, credentials, clock) -> None:
    fake_table.put_item(make_item(campaign="spring"))
    handler = _handler(fake_table, credentials, clock)

    result = await handler.revoke(TOKEN, "t1", _bearer(credentials))

    assert result.outcome is GateOutcome.SUCCESS
    assert result.revoked_at == NOW
    stored = fake_table.items[("t1", TOKEN)]
    assert stored["is_revoked"] is True
    assert stored["revoked_at"] == format_timestamp(NOW)
    assert stored["campaign"] == "spring"
    assert stored["expires_at"] == make_item()["expires_at"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "authorization",
    [None, "", "Basic abc", "Bearer ", "Bearer not-a-credential"],
)
async def test_missing_or_malformed_credential_is_unauthorized(
    fake_table, credentials, clock, authorization
) -> None:
    fake_table.put_item(make_item())
    handler = _handler(fake_table, credentials, clock)

    result = await handler.revoke(TOKEN, "t1", authorization)

    assert result.outcome is GateOutcome.UNAUTHORIZED
    assert fake_table.calls == []


@pytest.mark.asyncio
async def test_credential_from_other_secret_is_unauthorized(fake_table, credentials, clock) -> None:
    foreign = CallerCredentialService(secret="someone-else")
    handler = _handler(fake_table, credentials, clock)

    result = await handler.revoke(TOKEN, "t1", _bearer(foreign))

    assert result.outcome is GateOutcome.UNAUTHORIZED


@pytest.mark.asyncio
async def test_caller_cannot_revoke_other_owners_token(fake_table, credentials, clock) -> None:
    fake_table.put_item(make_item(owner_id="t2"))
    handler = _handler(fake_table, credentials, clock)

    result = await handler.revoke(TOKEN, "t2", _bearer(credentials, "t1"))

    assert result.outcome is GateOutcome.FORBIDDEN
    assert fake_table.items[("t2", TOKEN)]["is_revoked"] is False
    assert fake_table.calls == []


@pytest.mark.asyncio
async def test_unknown_or_incomplete_token_is_not_found(fake_table, credentials, clock) -> None:
    legacy = make_item(token="cafe" * 16)
    legacy.pop("target_url")
    fake_table.put_item(legacy)
    handler = _handler(fake_table, credentials, clock)

    missing = await handler.revoke(TOKEN, "t1", _bearer(credentials))
    incomplete = await handler.revoke("cafe" * 16, "t1", _bearer(credentials))

    assert missing.outcome is GateOutcome.NOT_FOUND
    assert incomplete.outcome is GateOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_revoke_is_idempotent(fake_table, credentials, clock) -> None:
    fake_table.put_item(make_item())
    handler = _handler(fake_table, credentials, clock)

    first = await handler.revoke(TOKEN, "t1", _bearer(credentials))
    clock.advance(minutes=2)
    second = await handler.revoke(TOKEN, "t1", _bearer(credentials))

    assert first.success and second.success
    assert second.revoked_at == NOW + timedelta(minutes=2)
    assert fake_table.items[("t1", TOKEN)]["is_revoked"] is True


@pytest.mark.asyncio
async def test_missing_parameters_are_reported(fake_table, credentials, clock) -> None:
    handler = _handler(fake_table, credentials, clock)

    no_token = await handler.revoke(None, "t1", _bearer(credentials))
    no_owner = await handler.revoke(TOKEN, "", _bearer(credentials))

    assert no_token.outcome is GateOutcome.MISSING_TOKEN
    assert no_owner.outcome is GateOutcome.MISSING_OWNER


@pytest.mark.asyncio
async def test_record_swept_before_update_is_not_found(fake_table, credentials, clock) -> None:
    fake_table.put_item(make_item())
    handler = _handler(fake_table, credentials, clock)
    original_replace = fake_table.replace_item

    def sweep_then_replace(item: dict) -> None:
        fake_table.items.clear()
        original_replace(item)

    fake_table.replace_item = sweep_then_replace

    result = await handler.revoke(TOKEN, "t1", _bearer(credentials))

    assert result.outcome is GateOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_store_failure_is_reported_as_error(fake_table, credentials, clock) -> None:
    fake_table.put_item(make_item())
    fake_table.fail_with = StoreUnavailableError("timeout")
    handler = _handler(fake_table, credentials, clock)

    result = await handler.revoke(TOKEN, "t1", _bearer(credentials))

    assert result.outcome is GateOutcome.VERIFICATION_FAILED


@pytest.mark.asyncio
async def test_unconfigured_credentials_fail_closed(fake_table, clock) -> None:
    fake_table.put_item(make_item())
    handler = RevocationHandler(TokenStore(fake_table, timeout_seconds=1.0), None, clock=clock)

    result = await handler.revoke(TOKEN, "t1", "Bearer anything")

    assert result.outcome is GateOutcome.VERIFICATION_FAILED
    assert fake_table.items[("t1", TOKEN)]["is_revoked"] is False


def test_authenticate_resolves_caller_before_any_body_handling(
    fake_table, credentials, clock
) -> None:
    handler = _handler(fake_table, credentials, clock)

    caller = handler.authenticate(_bearer(credentials, "t7"))
    rejected = handler.authenticate("Bearer garbage")

    assert caller.owner_id == "t7"
    assert rejected.outcome is GateOutcome.UNAUTHORIZED
    assert fake_table.calls == []
