"""
Database Configuration
"""
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Callable, Generator, Iterator, TypeVar
import logging

from accounts_api.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Get the properly formatted database URL
db_url = settings.database_url

# Create engine
engine = create_engine(
    db_url,
    connect_args={"check_same_thread": False} if "sqlite" in db_url else {},
    pool_pre_ping=not db_url.startswith("sqlite"),
    echo=settings.DEBUG
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base model
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures the session is closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work on an existing session.

    Commits when the block exits normally; rolls back and re-raises on any
    exception. The session keeps one connection checked out until then, so
    every statement in the block runs on the same connection.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def with_transaction(fn: Callable[[Session], T], session_factory=None) -> T:
    """
    Acquire a session, run ``fn(session)`` in one transaction and release it.

    The session is closed on every exit path.
    """
    factory = session_factory or SessionLocal
    db = factory()
    try:
        with transaction(db):
            return fn(db)
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database tables and the sequence store"""
    # Import all models to register them with Base
    from accounts_api import models  # noqa: F401
    from accounts_api.services.sequence_service import SequenceStore, KNOWN_SEQUENCES

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = Session(bind=bind)
    try:
        with transaction(db):
            SequenceStore(db).initialize(KNOWN_SEQUENCES)
    finally:
        db.close()
    logger.info(f"Database initialized ({len(KNOWN_SEQUENCES)} sequences registered)")
