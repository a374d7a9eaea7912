"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from token_gate.clients import DynamoDBTokenTable, SQLiteTokenTable
from token_gate.core.config import AppSettings, get_settings
from token_gate.services import (
    CallerCredentialService,
    CleanupSweeper,
    ContentProxy,
    RedirectResolver,
    ResponseFormatter,
    RevocationHandler,
    TokenStore,
    VerificationEngine,
)
from token_gate.services.token_store import TokenTable


@lru_cache()
def get_app_settings() -> AppSettings:
    """FastAPI dependency returning the process-wide settings."""
    return get_settings()


@lru_cache()
def get_token_table() -> TokenTable:
    """Provide the configured token table backend."""
    store_settings = get_app_settings().store
    if store_settings.backend == "dynamodb":
        return DynamoDBTokenTable(store_settings)
    return SQLiteTokenTable(
        store_settings.sqlite_path, timeout_seconds=store_settings.timeout_seconds
    )


@lru_cache()
def get_token_store() -> TokenStore:
    """Provide the async store adapter with its bounded timeout."""
    return TokenStore(
        get_token_table(), timeout_seconds=get_app_settings().store.timeout_seconds
    )


@lru_cache()
def get_cleanup_sweeper() -> CleanupSweeper:
    """Provide the shared sweeper so shutdown can drain pending deletes."""
    return CleanupSweeper(get_token_store())


def get_verification_engine() -> VerificationEngine:
    """Build a verification engine over the shared store."""
    return VerificationEngine(
        get_token_store(),
        get_cleanup_sweeper(),
        allow_legacy_scan=get_app_settings().gate.legacy_token_scan,
    )


@lru_cache()
def get_redirect_resolver() -> RedirectResolver:
    return RedirectResolver(get_app_settings().gate)


@lru_cache()
def get_content_proxy() -> Optional[ContentProxy]:
    """Provide the content proxy only when proxying is enabled."""
    gate = get_app_settings().gate
    if not gate.proxy_target_content:
        return None
    return ContentProxy(timeout_seconds=gate.proxy_timeout_seconds)


def get_response_formatter() -> ResponseFormatter:
    return ResponseFormatter(
        get_app_settings().gate,
        get_redirect_resolver(),
        content_proxy=get_content_proxy(),
    )


@lru_cache()
def get_caller_credentials() -> Optional[CallerCredentialService]:
    """Provide the caller credential service when a secret is configured."""
    security = get_app_settings().security
    if not security.caller_credential_secret:
        return None
    return CallerCredentialService(
        secret=security.caller_credential_secret,
        ttl_seconds=security.caller_credential_ttl_seconds,
    )


def get_revocation_handler() -> RevocationHandler:
    return RevocationHandler(get_token_store(), get_caller_credentials())


__all__ = [
    "get_app_settings",
    "get_caller_credentials",
    "get_cleanup_sweeper",
    "get_content_proxy",
    "get_redirect_resolver",
    "get_response_formatter",
    "get_revocation_handler",
    "get_token_store",
    "get_token_table",
    "get_verification_engine",
]
