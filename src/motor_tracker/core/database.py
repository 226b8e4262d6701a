"""SQLAlchemy 2.0 database setup for the tracking tables."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_settings

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for the tracking models."""

    pass


# Process-wide engine and session factory, built from settings on first use
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating the SQLite directory if needed."""
    global _engine
    if _engine is None:
        settings = get_settings()
        settings.ensure_directories()
        url = settings.database.url
        # Submissions may arrive from worker threads
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _engine = create_engine(url, echo=settings.database.echo, connect_args=connect_args)
        logger.debug("Created engine for %s", url)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def init_db(engine: Engine | None = None) -> None:
    """Create the tracking tables on ``engine`` (default: the shared engine)."""
    # Registers the tables on Base.metadata
    from motor_tracker.tracking import models as _  # noqa: F401

    Base.metadata.create_all(engine or get_engine())


@contextmanager
def get_session(factory: sessionmaker[Session] | None = None) -> Generator[Session, None, None]:
    """
    One unit of work: commit on success, roll back on error.

    Rows loaded or added inside the block are detached before commit, so
    callers can keep reading them after the session closes.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.flush()
        session.expunge_all()
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_engine() -> None:
    """Dispose the shared engine so the next call rebuilds it from settings."""
    global _engine, _session_factory
    if _engine:
        _engine.dispose()
    _engine = None
    _session_factory = None
