"""Expose dependency helpers for FastAPI routers."""

from .services import (
    get_app_settings,
    get_caller_credentials,
    get_cleanup_sweeper,
    get_content_proxy,
    get_redirect_resolver,
    get_response_formatter,
    get_revocation_handler,
    get_token_store,
    get_token_table,
    get_verification_engine,
)

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
