"""Public schema exports."""

from .verification import RevokeTokenRequest, VerifyTokenRequest

__all__ = ["RevokeTokenRequest", "VerifyTokenRequest"]
