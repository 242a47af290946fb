"""
Database configuration:
- pool_pre_ping for PostgreSQL, StaticPool for in-memory SQLite
- one Session per request via get_db()
- unit_of_work() wraps every multi-write operation in a single transaction
- preflight connection test with retry
"""
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Generator, Iterator
import logging
import time

from app.config import settings
from app.exceptions import StockroomError

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str, echo: bool = False):
    """Create an engine tuned for the backend behind `url`."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Every session must see the same in-memory database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    if "supabase" in url and "sslmode" not in url:
        url += "?sslmode=require"
        logger.info("Added sslmode=require to DATABASE_URL")

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=300,
        pool_timeout=30,
        echo=echo,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Commit everything written inside the block, or nothing.
    Any exception rolls the session back and propagates to the caller.
    """
    try:
        yield db
        db.commit()
    except StockroomError as e:
        db.rollback()
        if e.status_code < 500:
            # Refused on purpose (404, 400, 409): the handler reports it to the client
            logger.warning(f"Unit of work rolled back: {e.message}")
        else:
            logger.error(f"Unit of work rolled back: {e!r}")
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unit of work rolled back: {e!r}")
        raise


def init_db(bind=None) -> None:
    """Create all tables on `bind` (defaults to the application engine)."""
    # Models must be imported so their tables are registered on Base.metadata
    from app import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def test_connection(max_attempts: int = 3) -> tuple[bool, str]:
    """Preflight database test with retry"""
    for attempt in range(max_attempts):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True, "Database connection successful"
        except OperationalError as e:
            if attempt == max_attempts - 1:
                return False, f"Database connection failed: {e}"
            logger.warning(f"Database connection attempt {attempt + 1} failed, retrying...")
            time.sleep(1)
    return False, "Database connection test failed"
