"""
Logging utilities for the token gate.

Provides a consistent logging format and helpers that keep secrets out of logs.
"""

import logging
import sys

_REDACTED_PREFIX = 8


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def redact_token(token: str | None) -> str:
    """Return a log-safe rendering of a token value."""
    if not token:
        return "missing"
    return f"{token[:_REDACTED_PREFIX]}..."


__all__ = ["configure_logging", "redact_token"]
