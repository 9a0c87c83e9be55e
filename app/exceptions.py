# =============================================================================
# app/exceptions.py - Application Exceptions
# =============================================================================
# One exception class per application error code.
#
# Raise these anywhere below a route (services, dependencies, handlers);
# the envelope boundary in app/envelope.py turns them into
#   {"code": <code>, "message": <message>, "data": <data or null>}
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from core.models.response import ApiResponse, ResponseCode, ResponseMessage


class TrackFlowException(Exception):
    """
    Base exception for the TrackFlow API.

    All custom exceptions inherit from this class.
    Carries the envelope code, a human-readable message and, rarely,
    a data payload for the client.
    """

    code: ResponseCode = ResponseCode.INTERNAL_ERROR
    default_message: str = ResponseMessage.INTERNAL_ERROR

    def __init__(
        self,
        message: str | None = None,
        code: int | None = None,
        data: Any = None,
        suggestion: str | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = ResponseCode(code)
        self.data = data
        self.suggestion = suggestion

    def to_envelope(self) -> ApiResponse:
        """Convert exception to the response envelope."""
        return ApiResponse.error(self.code, self.message, data=self.data)

    def __str__(self) -> str:
        result = f"[{self.code.name}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


# =============================================================================
# Taxonomy
# =============================================================================

class InvalidParamsError(TrackFlowException):
    """Raised when request input fails validation."""
    code = ResponseCode.INVALID_PARAMS
    default_message = ResponseMessage.INVALID_PARAMS


class UnauthorizedError(TrackFlowException):
    """Raised when a request lacks a valid identity."""
    code = ResponseCode.UNAUTHORIZED
    default_message = ResponseMessage.UNAUTHORIZED


class ForbiddenError(TrackFlowException):
    """Raised when an identity may not perform the operation."""
    code = ResponseCode.FORBIDDEN
    default_message = ResponseMessage.FORBIDDEN


class NotFoundError(TrackFlowException):
    """Raised when a requested resource doesn't exist."""
    code = ResponseCode.NOT_FOUND
    default_message = ResponseMessage.NOT_FOUND


class InternalError(TrackFlowException):
    """Raised for unexpected server-side failures."""
    code = ResponseCode.INTERNAL_ERROR
    default_message = ResponseMessage.INTERNAL_ERROR


class DatabaseError(TrackFlowException):
    """Raised when the persistence layer fails."""
    code = ResponseCode.DATABASE_ERROR
    default_message = ResponseMessage.DATABASE_ERROR


class BusinessError(TrackFlowException):
    """Raised when a request is well-formed but violates a business rule."""
    code = ResponseCode.BUSINESS_ERROR
    default_message = ResponseMessage.BUSINESS_ERROR


# =============================================================================
# User Exceptions
# =============================================================================

class DuplicateEmailError(BusinessError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            message="邮箱已被注册",
            suggestion=f"Log in as {email} or register with a different email",
        )
        self.email = email


class UserNotFoundError(NotFoundError):
    """Raised when a user ID doesn't exist."""

    def __init__(self, user_id: int | str):
        super().__init__(
            message="用户不存在",
            suggestion="Check that the user_id is correct",
        )
        self.user_id = user_id
