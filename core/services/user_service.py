# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles user registration, login and lookup.
# Separates HTTP concerns from database/business logic.
#
# The service is built around an explicit SQLAlchemy session handed in by
# the caller (see app/dependencies.py), so tests can pass their own.
# =============================================================================

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import DatabaseError, DuplicateEmailError, UserNotFoundError
from core.models.user import LoginResult
from lib.database import UserRow
from lib.passwords import hash_password, verify_password
from lib.tokens import DEFAULT_ALGORITHM, DEFAULT_TOKEN_TTL, create_token

logger = logging.getLogger(__name__)

LOGIN_SUCCESS_MESSAGE = "登录成功"
LOGIN_FAILED_MESSAGE = "邮箱或密码错误"


def normalize_email(email: str) -> str:
    """Trim and lower-case an email so lookups are case-insensitive."""
    return email.strip().lower()


class UserService:
    """
    Service for user operations.

    Provides a clean interface between API routes and database.

    Example:
        service = UserService(db, token_secret=settings.JWT_SECRET)
        user = service.register("a@x.com", "pw")
        result = service.authenticate("a@x.com", "pw")
    """

    def __init__(
        self,
        db: Session,
        *,
        token_secret: str,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        token_algorithm: str = DEFAULT_ALGORITHM,
    ):
        self.db = db
        self.token_secret = token_secret
        self.token_ttl = token_ttl
        self.token_algorithm = token_algorithm

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_users(self) -> list[UserRow]:
        """Get all users, oldest first."""
        return list(self.db.execute(select(UserRow).order_by(UserRow.id)).scalars())

    def list_users_page(self, page: int = 1, page_size: int = 10) -> tuple[list[UserRow], int]:
        """
        Get one page of users.

        Args:
            page: Page number (1-indexed)
            page_size: Maximum users per page

        Returns:
            Tuple of (users on this page, total user count)
        """
        total = self.db.execute(select(func.count()).select_from(UserRow)).scalar_one()
        offset = (page - 1) * page_size
        users = list(
            self.db.execute(
                select(UserRow).order_by(UserRow.id).offset(offset).limit(page_size)
            ).scalars()
        )
        return users, total

    def get_user(self, user_id: int) -> UserRow:
        """
        Get a user by ID.

        Raises:
            UserNotFoundError: If no user has this ID
        """
        user = self.db.get(UserRow, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def find_by_email(self, email: str) -> UserRow | None:
        return self.db.execute(
            select(UserRow).where(UserRow.email == normalize_email(email))
        ).scalar_one_or_none()

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def register(self, email: str, password: str, name: str | None = None) -> UserRow:
        """
        Create a new user.

        The password is hashed before it reaches the database.

        Args:
            email: Login email (must not already be registered)
            password: Plaintext password
            name: Optional display name

        Returns:
            The created user row

        Raises:
            DuplicateEmailError: If the email is already registered
            DatabaseError: If the insert fails for any other reason
        """
        email = normalize_email(email)

        if self.find_by_email(email) is not None:
            logger.info(f"Registration rejected, email already exists: {email}")
            raise DuplicateEmailError(email)

        user = UserRow(email=email, password=hash_password(password), name=name)

        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            logger.info(f"Registration rejected by unique constraint: {email}")
            raise DuplicateEmailError(email)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {e}")
            raise DatabaseError() from e

        logger.info(f"Registered user: {user.id} ({email})")
        return user

    def issue_token(self, user: UserRow) -> str:
        """Sign an identity token for `user`."""
        return create_token(
            {"sub": str(user.id), "email": user.email},
            self.token_secret,
            self.token_ttl,
            algorithm=self.token_algorithm,
        )

    def authenticate(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and issue a token.

        Never raises for bad credentials: an unknown email and a wrong
        password both come back as success=False with the same message.

        Returns:
            LoginResult with a token on success
        """
        user = self.find_by_email(email)

        if user is None or not verify_password(password, user.password):
            logger.info(f"Login failed for: {normalize_email(email)}")
            return LoginResult(success=False, message=LOGIN_FAILED_MESSAGE)

        logger.info(f"User logged in: {user.id}")
        return LoginResult(
            success=True,
            message=LOGIN_SUCCESS_MESSAGE,
            token=self.issue_token(user),
        )
