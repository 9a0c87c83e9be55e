# =============================================================================
# lib/database.py - SQLAlchemy Persistence Handle
# =============================================================================
# ORM models and engine/session helpers for the relational store.
#
# There is no module-level client: the application builds one engine and
# one session factory in create_app() and hands sessions to services
# through FastAPI dependencies. Tests build their own against in-memory
# SQLite.
#
# Usage:
#   engine = make_engine("sqlite:///./trackflow.sqlite3")
#   init_db(engine)
#   SessionLocal = make_session_factory(engine)
#   with SessionLocal() as db:
#       db.add(UserRow(email="a@x.com", password=hash_password("pw")))
#       db.commit()
# =============================================================================

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, TypeDecorator, create_engine
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

DEFAULT_SQLITE_URL = "sqlite:///./trackflow.sqlite3"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC.

    SQLite drops the offset of `DateTime(timezone=True)` values, so values
    are normalized to UTC on the way in and tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UserRow(Base):
    """
    A registered user.

    Attributes:
        id: Auto-increment primary key
        email: Login email, unique across users
        password: Salted hash from lib.passwords (never plaintext)
        name: Optional display name
        created_at: When the user registered (UTC)
        updated_at: Last modification time (UTC)
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(256))
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"UserRow(id={self.id!r}, email={self.email!r})"


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url in ("sqlite://", "sqlite:///:memory:") or db_url.endswith(":memory:")


def make_engine(db_url: str = DEFAULT_SQLITE_URL, echo: bool = False) -> Engine:
    """
    Create an engine for `db_url`.

    SQLite connections are shared across FastAPI's worker threads, and an
    in-memory database is pinned to a single connection so every session
    sees the same tables.
    """
    if db_url.startswith("sqlite:"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(db_url):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=echo, future=True, **kwargs)
    return create_engine(db_url, echo=echo, future=True, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
    )


def init_db(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    Base.metadata.create_all(engine)
