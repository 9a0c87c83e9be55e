# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Protected routes. The whole router sits behind get_current_user, so no
# handler here runs without a verified identity.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser
from app.dependencies import UserServiceDep
from app.envelope import EnvelopeRoute
from core.models.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
    route_class=EnvelopeRoute,
    dependencies=[Depends(get_current_user)],
)


@router.get("/profile")
def get_profile(
    service: UserServiceDep,
    user: AuthUser = Depends(get_current_user),
) -> dict:
    """
    Get the current authenticated user's profile.

    Returns:
        {"userInfo": {id, email, name, createdAt, updatedAt}}

    Raises:
        401: If not authenticated
        404: If the token's user no longer exists
    """
    row = service.get_user(user.id)
    return {"userInfo": UserResponse.model_validate(row)}


@router.get("/verify")
async def verify_token(user: AuthUser = Depends(get_current_user)) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.
    """
    return {
        "valid": True,
        "userId": user.id,
        "email": user.email,
    }
