# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - response.py: The response envelope, codes and pagination payload
# - user.py: User request/response schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Response Envelope
# -----------------------------------------------------------------------------
from .response import (
    ApiResponse,
    PaginationData,
    ResponseCode,
    ResponseMessage,
)

# -----------------------------------------------------------------------------
# User Models
# -----------------------------------------------------------------------------
from .user import (
    LoginRequest,
    LoginResult,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)

__all__ = [
    # Response
    "ApiResponse",
    "PaginationData",
    "ResponseCode",
    "ResponseMessage",
    # User
    "LoginRequest",
    "LoginResult",
    "RegisterRequest",
    "RegisterResponse",
    "UserResponse",
]
