# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - database.py: SQLAlchemy models and engine/session helpers
# - passwords.py: Salted password hashing and verification
# - tokens.py: Signed, time-limited identity tokens
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.database import Base, UserRow, init_db, make_engine, make_session_factory
from lib.passwords import MalformedHashError, hash_password, verify_password
from lib.tokens import (
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    create_token,
    verify_token,
)

__all__ = [
    # Database
    "Base",
    "UserRow",
    "init_db",
    "make_engine",
    "make_session_factory",
    # Passwords
    "MalformedHashError",
    "hash_password",
    "verify_password",
    # Tokens
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "create_token",
    "verify_token",
]
