# =============================================================================
# app/auth/dependencies.py - Auth Guard
# =============================================================================
# FastAPI dependencies that guard protected routes.
#
# get_current_user:
# 1. Extracts the Bearer token from the Authorization header
# 2. Verifies signature and expiry against JWT_SECRET
# 3. Stores the identity on request.state.user and returns it
#
# Every failure raises UnauthorizedError (or InternalError for the
# unexpected), which the envelope boundary renders as
#   {"code": 401, "message": "...", "data": null}
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from app.auth.models import AuthUser, TokenPayload
from app.config import Settings
from app.dependencies import get_app_settings
from app.exceptions import InternalError, UnauthorizedError
from lib.tokens import TokenExpiredError, TokenInvalidError, verify_token

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor. auto_error is off so a missing header is
# reported through the envelope instead of FastAPI's own 403/401.
security = HTTPBearer(auto_error=False)

NO_TOKEN_MESSAGE = "No token provided"
TOKEN_EXPIRED_MESSAGE = "Token has expired"
TOKEN_INVALID_MESSAGE = "Token is invalid"
GUARD_FAILURE_MESSAGE = "服务器异常"


def authenticate_token(token: str, app_settings: Settings) -> AuthUser:
    """
    Verify a raw token and build the identity it carries.

    Raises:
        UnauthorizedError: If the token is expired, invalid or lacks a user ID
        InternalError: If verification fails for any other reason
    """
    try:
        claims = verify_token(token, app_settings.JWT_SECRET, algorithm=app_settings.JWT_ALGORITHM)
        payload = TokenPayload(**claims)
        return AuthUser(id=int(payload.sub), email=payload.email)

    except TokenExpiredError:
        logger.warning("Token has expired")
        raise UnauthorizedError(TOKEN_EXPIRED_MESSAGE)

    except TokenInvalidError as e:
        logger.warning(f"Token validation failed: {e}")
        raise UnauthorizedError(TOKEN_INVALID_MESSAGE)

    except (ValidationError, ValueError) as e:
        logger.warning(f"Token carries no usable user ID: {e}")
        raise UnauthorizedError(TOKEN_INVALID_MESSAGE)

    except Exception as e:
        logger.exception(f"Token verification error: {e}")
        raise InternalError(GUARD_FAILURE_MESSAGE) from e


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    app_settings: Settings = Depends(get_app_settings),
) -> AuthUser:
    """
    Extract and validate the user from the request's Bearer token.

    FastAPI caches dependencies per request, so a route that is guarded
    both router-wide and in its own signature verifies the token once.

    Returns:
        AuthUser: The authenticated user, also stored as request.state.user

    Raises:
        UnauthorizedError: If the token is missing, expired or invalid
    """
    if credentials is None or not credentials.credentials:
        logger.info(f"Rejected {request.method} {request.url.path}: no token")
        raise UnauthorizedError(NO_TOKEN_MESSAGE)

    user = authenticate_token(credentials.credentials, app_settings)
    request.state.user = user

    logger.debug(f"Authenticated user: {user.id}")
    return user

