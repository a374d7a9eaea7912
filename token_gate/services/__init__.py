"""Service layer exports."""

from .caller_credentials import (
    CallerAuthenticationError,
    CallerCredentialService,
    CallerIdentity,
)
from .cleanup import CleanupSweeper
from .content_proxy import ContentFetchError, ContentProxy
from .outcomes import GateOutcome
from .redirects import RedirectResolver, ResolvedRedirect
from .responses import ResponseFormatter, ResponseStyle
from .revocation import RevocationHandler, RevocationResult
from .token_store import TokenStore
from .verification import VerificationEngine, VerificationResult

__all__ = [
    "CallerAuthenticationError",
    "CallerCredentialService",
    "CallerIdentity",
    "CleanupSweeper",
    "ContentFetchError",
    "ContentProxy",
    "GateOutcome",
    "RedirectResolver",
    "ResolvedRedirect",
    "ResponseFormatter",
    "ResponseStyle",
    "RevocationHandler",
    "RevocationResult",
    "TokenStore",
    "VerificationEngine",
    "VerificationResult",
]
