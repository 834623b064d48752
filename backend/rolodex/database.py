"""Engine, sessions and table creation for the contact store."""

import logging
from contextlib import contextmanager
from typing import Iterator
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy import event
from sqlalchemy.orm import Session
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from rolodex.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

SQLITE_BUSY_TIMEOUT = 30


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ``ON DELETE CASCADE`` unless this pragma is on."""

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str, **kwargs) -> Engine:
    """Build an engine for *db_url*.

    For SQLite the connection may be shared across threads (FastAPI runs sync
    routes in a worker pool), waits for locks instead of failing at once, and
    enforces foreign keys on every new connection.  Extra keyword arguments
    go straight to :func:`sqlalchemy.create_engine`.
    """
    connect_args = dict(kwargs.pop("connect_args", {}))
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite:
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", SQLITE_BUSY_TIMEOUT)

    engine = create_engine(db_url, connect_args=connect_args, **kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_sessionmaker(engine: Engine) -> sessionmaker:
    """Session factory for one unit of work per request.

    Nothing is flushed before the explicit commit, and saved rows stay
    readable after it, so post-commit hooks and response serialisation do
    not trigger another query.
    """

    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


_settings = get_settings()

# Tests replace these two module attributes before importing the app.
default_engine = make_engine(_settings.resolved_database_url)
default_session_factory = make_sessionmaker(default_engine)


def get_session_factory() -> sessionmaker:
    return default_session_factory


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request, closed afterwards."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def db_session(session_factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """Unit of work outside a request (scripts, maintenance tasks).

    Commits when the block finishes, rolls back and re-raises if it fails.

        with db_session() as db:
            crud.add_contact(db, contact)
    """
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.error("Unit of work rolled back: %s", exc)
        raise
    finally:
        session.close()


def initialize_database(engine: Optional[Engine] = None) -> None:
    """Create any missing contact tables on *engine* (default: the app engine)."""
    # Registers the mapped classes on Base.metadata.
    import rolodex.models.models  # noqa: F401

    Base.metadata.create_all(bind=engine or default_engine)
