try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from conftest import NOW, TOKEN, make_item
from token_gate.main import app
from token_gate.models import format_timestamp
from token_gate.services import (
    CallerCredentialService,
    RedirectResolver,
    ResponseFormatter,
    RevocationHandler,
    TokenStore,
)

pytestmark = pytest.mark.anyio


@pytest.fixture()
def credentials() -> CallerCredentialService:
    return CallerCredentialService(secret="endpoint-secret")


@pytest.fixture()
async def client(fake_table, clock, gate_settings, credentials):
    from token_gate import dependencies

    handler = RevocationHandler(
        TokenStore(fake_table, timeout_seconds=1.0), credentials, clock=clock
    )
    formatter = ResponseFormatter(gate_settings, RedirectResolver(gate_settings))
    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_revocation_handler: lambda: handler,
            dependencies.get_response_formatter: lambda: formatter,
        }
    )

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _auth(credentials: CallerCredentialService, owner_id: str = "t1") -> dict:
    return {"Authorization": f"Bearer {credentials.issue(owner_id)}"}


async def test_owner_can_revoke_token(client, fake_table, credentials):
    fake_table.put_item(make_item())

    response = await client.post(
        "/api/revoke-token",
        json={"token": TOKEN, "ownerId": "t1"},
        headers=_auth(credentials),
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Token successfully revoked",
        "revokedAt": format_timestamp(NOW),
    }
    assert fake_table.items[("t1", TOKEN)]["is_revoked"] is True
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"


async def test_revoke_without_credential_is_unauthorized(client, fake_table):
    fake_table.put_item(make_item())

    response = await client.post(
        "/api/revoke-token", json={"token": TOKEN, "ownerId": "t1"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"
    assert fake_table.items[("t1", TOKEN)]["is_revoked"] is False


async def test_revoke_other_owner_is_forbidden(client, fake_table, credentials):
    fake_table.put_item(make_item(owner_id="t2"))

    response = await client.post(
        "/api/revoke-token",
        json={"token": TOKEN, "ownerId": "t2"},
        headers=_auth(credentials, "t1"),
    )

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"
    assert fake_table.items[("t2", TOKEN)]["is_revoked"] is False


async def test_revoke_unknown_token_is_not_found(client, credentials):
    response = await client.post(
        "/api/revoke-token",
        json={"token": TOKEN, "ownerId": "t1"},
        headers=_auth(credentials),
    )

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


async def test_revoke_malformed_body(client, credentials):
    anonymous = await client.post(
        "/api/revoke-token",
        content=b"[broken",
        headers={"content-type": "application/json"},
    )
    authenticated = await client.post(
        "/api/revoke-token",
        content=b"[broken",
        headers={"content-type": "application/json", **_auth(credentials)},
    )

    forged = await client.post(
        "/api/revoke-token",
        content=b"{not json",
        headers={"content-type": "application/json", "Authorization": "Bearer garbage"},
    )

    assert anonymous.status_code == 401
    assert forged.status_code == 401
    assert forged.json()["error"] == "unauthorized"
    assert authenticated.status_code == 400
    assert authenticated.json()["error"] == "invalid_request"


async def test_revoke_preflight(client):
    response = await client.options(
        "/api/revoke-token", headers={"origin": "http://localhost:3000"}
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "Authorization" in response.headers["access-control-allow-headers"]
