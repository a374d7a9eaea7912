"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "ALLOWED_ORIGINS": "https://app.example.com,https://tools.example.com",
    "LOCAL_DEV_ORIGINS": "http://localhost:3000",
    "FALLBACK_URL": "https://app.example.com/dashboard",
    "FAILED_TOKEN_URL": "https://app.example.com/access-denied",
    "STORE_BACKEND": "sqlite",
    "TOKEN_DB_PATH": str(Path(tempfile.gettempdir()) / "token-gate-tests.db"),
    "CALLER_CREDENTIAL_SECRET": "test-caller-secret",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_REGION": "us-east-1",
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
