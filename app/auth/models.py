# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a verified token.

    This is the minimal user info available from the token itself,
    without querying the database.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    email: Optional[str] = None


class TokenPayload(BaseModel):
    """
    Claims carried by an identity token.

    `sub` is the user ID as a string; iat/exp are handled by lib.tokens.
    """

    model_config = ConfigDict(extra="allow")

    sub: str
    email: Optional[str] = None
