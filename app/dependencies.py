# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The database handle lives on the application instance (app.state), so
# each app built by create_app() - including the ones tests build - has
# its own engine and session factory.
# =============================================================================

from typing import Annotated, Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from core.services.user_service import UserService


def get_app_settings(request: Request) -> Settings:
    """
    Get the settings the running app was built with.

    Falls back to the process-wide settings for apps that didn't set any.
    """
    return getattr(request.app.state, "settings", None) or get_settings()


def get_db(request: Request) -> Iterator[Session]:
    """
    Open a database session for the duration of one request.

    The session is closed (and any uncommitted work rolled back) when the
    request finishes.
    """
    session_factory = request.app.state.session_factory
    with session_factory() as session:
        yield session


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
    app_settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserService:
    """Build a UserService bound to the request's database session."""
    return UserService(
        db,
        token_secret=app_settings.JWT_SECRET,
        token_ttl=app_settings.token_ttl,
        token_algorithm=app_settings.JWT_ALGORITHM,
    )


# Type aliases for dependency injection
DbDep = Annotated[Session, Depends(get_db)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
