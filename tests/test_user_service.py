# =============================================================================
# tests/test_user_service.py - UserService Tests
# =============================================================================
# Runs the service against a fresh in-memory SQLite database per test.
# =============================================================================

from datetime import timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import DatabaseError, DuplicateEmailError, UserNotFoundError
from core.services.user_service import LOGIN_FAILED_MESSAGE, LOGIN_SUCCESS_MESSAGE, normalize_email
from lib.database import UserRow
from lib.passwords import verify_password
from lib.tokens import verify_token
from tests.conftest import TEST_SECRET


def _seed(db_session, count):
    """Insert users directly, skipping password hashing."""
    db_session.add_all(
        [UserRow(email=f"user{i}@x.com", password="unused") for i in range(count)]
    )
    db_session.commit()


class TestNormalizeEmail:

    def test_trims_and_lowercases(self):
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


class TestRegister:

    def test_creates_user(self, user_service):
        user = user_service.register("a@x.com", "pw")

        assert user.id is not None
        assert user.email == "a@x.com"
        assert user.name is None
        assert user.created_at is not None
        assert user.updated_at is not None

    def test_stores_hash_not_plaintext(self, user_service):
        user = user_service.register("a@x.com", "pw")

        assert user.password != "pw"
        assert verify_password("pw", user.password)

    def test_stores_name(self, user_service):
        assert user_service.register("a@x.com", "pw", name="Alice").name == "Alice"

    def test_normalizes_email(self, user_service):
        assert user_service.register(" A@X.com", "pw").email == "a@x.com"

    def test_duplicate_email(self, user_service):
        user_service.register("a@x.com", "pw")

        with pytest.raises(DuplicateEmailError) as exc_info:
            user_service.register("a@x.com", "other")

        assert exc_info.value.code == 502
        assert exc_info.value.message == "邮箱已被注册"

    def test_duplicate_differs_only_in_case(self, user_service):
        user_service.register("a@x.com", "pw")

        with pytest.raises(DuplicateEmailError):
            user_service.register("A@X.COM", "pw")

    def test_duplicate_caught_by_unique_constraint(self, user_service, monkeypatch):
        """A concurrent insert that slips past the lookup still fails cleanly."""
        user_service.register("a@x.com", "pw")
        monkeypatch.setattr(user_service, "find_by_email", lambda email: None)

        with pytest.raises(DuplicateEmailError):
            user_service.register("a@x.com", "pw")

        assert len(user_service.list_users()) == 1

    def test_database_failure(self, user_service, monkeypatch):
        def fail():
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(user_service.db, "commit", fail)

        with pytest.raises(DatabaseError) as exc_info:
            user_service.register("a@x.com", "pw")

        assert exc_info.value.code == 501


class TestAuthenticate:

    def test_success_issues_token(self, user_service):
        user = user_service.register("a@x.com", "pw")

        result = user_service.authenticate("a@x.com", "pw")

        assert result.success is True
        assert result.message == LOGIN_SUCCESS_MESSAGE
        assert verify_token(result.token, TEST_SECRET) == {"sub": str(user.id), "email": "a@x.com"}

    def test_email_lookup_ignores_case(self, user_service):
        user_service.register("a@x.com", "pw")

        assert user_service.authenticate("A@x.COM", "pw").success

    def test_wrong_password(self, user_service):
        user_service.register("a@x.com", "pw")

        result = user_service.authenticate("a@x.com", "nope")

        assert result.success is False
        assert result.message == LOGIN_FAILED_MESSAGE
        assert result.token is None

    def test_unknown_email_same_as_wrong_password(self, user_service):
        user_service.register("a@x.com", "pw")

        unknown = user_service.authenticate("b@x.com", "pw")
        wrong = user_service.authenticate("a@x.com", "nope")

        assert unknown == wrong


class TestQueries:

    def test_list_users_empty(self, user_service):
        assert user_service.list_users() == []

    def test_list_users_in_id_order(self, user_service, db_session):
        _seed(db_session, 3)

        assert [u.email for u in user_service.list_users()] == [
            "user0@x.com",
            "user1@x.com",
            "user2@x.com",
        ]

    def test_get_user(self, user_service):
        created = user_service.register("a@x.com", "pw")

        assert user_service.get_user(created.id).email == "a@x.com"

    def test_timestamps_read_back_as_utc(self, user_service, db_session):
        """SQLite stores no offset; reloaded timestamps are still UTC-aware."""
        created = user_service.register("a@x.com", "pw")
        db_session.expire_all()

        reloaded = user_service.get_user(created.id)

        assert reloaded.created_at.tzinfo == timezone.utc
        assert reloaded.updated_at.tzinfo == timezone.utc

    def test_get_missing_user(self, user_service):
        with pytest.raises(UserNotFoundError) as exc_info:
            user_service.get_user(999)

        assert exc_info.value.code == 404

    def test_find_by_email(self, user_service):
        user_service.register("a@x.com", "pw")

        assert user_service.find_by_email("A@X.com") is not None
        assert user_service.find_by_email("b@x.com") is None

    @pytest.mark.parametrize(
        "total,page,page_size",
        [(0, 1, 10), (5, 1, 10), (10, 1, 10), (11, 2, 10), (7, 3, 3), (7, 4, 3), (3, 9, 2)],
    )
    def test_list_users_page(self, user_service, db_session, total, page, page_size):
        _seed(db_session, total)

        users, count = user_service.list_users_page(page=page, page_size=page_size)

        offset = (page - 1) * page_size
        assert count == total
        assert len(users) == min(page_size, max(total - offset, 0))
