"""Bearer credentials identifying the owner calling the revocation endpoint."""

from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

_BEARER_PREFIX = "bearer "


class CallerAuthenticationError(Exception):
    """Raised when a bearer credential is absent, malformed or expired."""


@dataclass(frozen=True, slots=True)
class CallerIdentity:
    owner_id: str


class CallerCredentialService:
    """Issue and verify Fernet-sealed caller credentials."""

    def __init__(self, *, secret: str, ttl_seconds: int = 3600) -> None:
        if not secret:
            raise ValueError("Caller credential secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        key = base64.urlsafe_b64encode(digest)
        self._fernet = Fernet(key)
        self._ttl = ttl_seconds

    def issue(self, owner_id: str) -> str:
        """Mint a credential asserting ``owner_id``."""
        if not owner_id:
            raise ValueError("owner_id is required to issue a credential.")
        payload = json.dumps({"owner_id": owner_id}, separators=(",", ":"))
        return self._fernet.encrypt(payload.encode("utf-8")).decode("utf-8")

    def verify(self, credential: str) -> CallerIdentity:
        """Decode a credential, enforcing the configured maximum age."""
        try:
            plaintext = self._fernet.decrypt(credential.encode("utf-8"), ttl=self._ttl)
        except InvalidToken as exc:
            raise CallerAuthenticationError("Invalid or expired caller credential.") from exc
        try:
            payload = json.loads(plaintext)
        except ValueError as exc:
            raise CallerAuthenticationError("Caller credential payload is malformed.") from exc
        owner_id = payload.get("owner_id") if isinstance(payload, dict) else None
        if not isinstance(owner_id, str) or not owner_id:
            raise CallerAuthenticationError("Caller credential carries no owner.")
        return CallerIdentity(owner_id=owner_id)

    def authenticate(self, authorization: Optional[str]) -> CallerIdentity:
        """Resolve the caller from an ``Authorization: Bearer ...`` header."""
        if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
            raise CallerAuthenticationError("Missing bearer credential.")
        credential = authorization[len(_BEARER_PREFIX):].strip()
        if not credential:
            raise CallerAuthenticationError("Empty bearer credential.")
        return self.verify(credential)


__all__ = [
    "CallerAuthenticationError",
    "CallerCredentialService",
    "CallerIdentity",
]
