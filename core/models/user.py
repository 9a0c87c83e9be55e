# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the API contract for user operations:
# - RegisterRequest / LoginRequest: validated request bodies
# - UserResponse: public view of a user record (never includes the password)
# - RegisterResponse: UserResponse plus the freshly issued token
# - LoginResult: result object returned by the login flow
#
# All models serialize with camelCase keys (createdAt, updatedAt, ...).
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Shared config: accept snake_case or camelCase, emit camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RegisterRequest(_CamelModel):
    """
    Body of POST /api/user/register.

    Example:
        {"email": "a@x.com", "password": "pw", "name": "Alice"}
    """

    email: EmailStr = Field(..., description="Login email, unique per user")
    password: str = Field(..., min_length=1, max_length=128, description="Plaintext password")
    name: str | None = Field(default=None, max_length=100, description="Optional display name")


class LoginRequest(_CamelModel):
    """Body of POST /api/user/login."""

    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=1, max_length=128, description="Plaintext password")


class UserResponse(_CamelModel):
    """
    Public user record.

    Built from a UserRow with `UserResponse.model_validate(row)`.
    The hashed password column is never exposed.
    """

    id: int
    email: str
    name: str | None = None
    created_at: datetime
    updated_at: datetime


class RegisterResponse(UserResponse):
    """Registered user plus a token so the client is signed in immediately."""

    token: str


class LoginResult(_CamelModel):
    """
    Outcome of a login attempt.

    Failure is reported through `success=False` rather than an exception,
    so the route decides how to envelope it.
    """

    success: bool
    message: str
    token: str | None = None
