"""SQLAlchemy engine, session factory and declarative base."""

from sqlalchemy import DateTime, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from cinegate.config import get_settings
from cinegate.core.clock import as_utc

settings = get_settings()

# check_same_thread=False needed for SQLite with FastAPI's threadpool
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Timestamp column that always hands back timezone-aware UTC values.

    SQLite drops the offset on storage, Postgres keeps it; either way reads
    come back comparable with utcnow().
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)


def get_db():
    """
    Dependency that provides a database session to route handlers.
    Ensures the session is closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables. Models must be imported before this runs."""
    Base.metadata.create_all(bind=engine)
