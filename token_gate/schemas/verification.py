"""
Pydantic models for verify and revoke request bodies.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class VerifyTokenRequest(BaseModel):
    """JSON body for programmatic token verification."""

    model_config = ConfigDict(extra="ignore")

    token: Optional[str] = Field(None, description="Access token presented by the caller.")
    owner_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("ownerId", "owner_id"),
        description="Partition identifier the token was issued under.",
    )
    redirect_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("redirectUrl", "redirect_url", "targetUrl"),
        description="Optional destination override, subject to the origin allow-list.",
    )


class RevokeTokenRequest(BaseModel):
    """JSON body for revoking a token."""

    model_config = ConfigDict(extra="ignore")

    token: Optional[str] = Field(None, description="Token to revoke.")
    owner_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("ownerId", "owner_id"),
        description="Owner the token belongs to; must match the caller.",
    )


__all__ = ["RevokeTokenRequest", "VerifyTokenRequest"]
