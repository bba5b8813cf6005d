"""Database session. SQLite compatible with connection pooling.

One session per inbound request (`app.api.deps.get_db`) or per webhook
message (`session_scope`); both close the session on every exit path.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def _connect_args(database_url: str, statement_timeout_ms: int) -> dict:
    if database_url.startswith("sqlite"):
        # SQLite busy timeout is in seconds
        return {"check_same_thread": False, "timeout": statement_timeout_ms / 1000}
    if database_url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return {}


def build_engine(database_url: str, statement_timeout_ms: int = 5000):
    connect_args = _connect_args(database_url, statement_timeout_ms)

    # Configure connection pooling for better concurrency
    if database_url.startswith("sqlite"):
        # SQLite: Use NullPool for thread-safety
        from sqlalchemy.pool import NullPool
        return create_engine(
            database_url,
            connect_args=connect_args,
            poolclass=NullPool,
        )

    # PostgreSQL/MySQL: Use QueuePool with sensible defaults
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_size=5,  # Number of persistent connections
        max_overflow=10,  # Max temporary connections
        pool_timeout=30,  # Seconds to wait for connection
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Verify connection health
    )


engine = build_engine(settings.DATABASE_URL, settings.DB_STATEMENT_TIMEOUT_MS)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """Yield a session that is rolled back on error and always closed."""
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
