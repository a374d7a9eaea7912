"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import time
from datetime import datetime, timedelta, timezone

import pytest

from token_gate.clients.errors import StoreConflictError, StoreUnavailableError
from token_gate.core.config import GateSettings

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
TOKEN = "deadbeef" * 8


class FakeTokenTable:
    """Dict-backed token table recording every call."""

    def __init__(self) -> None:
        self.items: dict[tuple[str, str], dict] = {}
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self.delay_seconds = 0.0

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.fail_with is not None:
            raise self.fail_with

    def put_item(self, item: dict) -> None:
        self.items[(item["pk"], item["sk"])] = dict(item)

    def get_item(self, *, partition_key: str, sort_key: str) -> dict | None:
        self._enter("get_item")
        item = self.items.get((partition_key, sort_key))
        return dict(item) if item is not None else None

    def delete_item(self, *, partition_key: str, sort_key: str) -> bool:
        self._enter("delete_item")
        return self.items.pop((partition_key, sort_key), None) is not None

    def replace_item(self, item: dict) -> None:
        self._enter("replace_item")
        key = (item["pk"], item["sk"])
        if key not in self.items:
            raise StoreConflictError(f"{key} missing")
        self.items[key] = dict(item)

    def scan_by_sort_key(self, sort_key: str) -> list[dict]:
        self._enter("scan_by_sort_key")
        return [dict(item) for (_, sk), item in self.items.items() if sk == sort_key]


def make_item(
    *,
    owner_id: str = "t1",
    token: str = TOKEN,
    target_url: str = "https://app.example.com/act",
    expires_at: datetime | None = None,
    issued_at: datetime | None = None,
    is_revoked: bool = False,
    **extra,
) -> dict:
    expires_at = expires_at or NOW + timedelta(minutes=60)
    issued_at = issued_at or NOW - timedelta(minutes=5)
    item = {
        "pk": owner_id,
        "sk": token,
        "owner_id": owner_id,
        "target_url": target_url,
        "expires_at": expires_at.isoformat(),
        "issued_at": issued_at.isoformat(),
        "is_revoked": is_revoked,
    }
    item.update(extra)
    return item


class MutableClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def fake_table() -> FakeTokenTable:
    return FakeTokenTable()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def gate_settings() -> GateSettings:
    return GateSettings(
        allowed_origins=("https://app.example.com", "https://tools.example.com/kit"),
        local_dev_origins=("http://localhost:3000",),
        fallback_url="https://app.example.com/dashboard",
        failed_token_url="https://app.example.com/access-denied",
    )


__all__ = [
    "FakeTokenTable",
    "MutableClock",
    "NOW",
    "StoreUnavailableError",
    "TOKEN",
    "make_item",
]
