"""Database helpers for betledger."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from betledger.config import get_settings
from betledger.db.models import Base

settings = get_settings()
_connect_args = {"check_same_thread": False} if str(settings.database_url).startswith("sqlite") else {}
engine = create_engine(str(settings.database_url), future=True, echo=False, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)

SessionFactory = Callable[[], Session]

__all__ = ["engine", "SessionLocal", "SessionFactory", "get_session", "init_db", "session_scope"]


@contextmanager
def session_scope(factory: SessionFactory) -> Iterator[Session]:
    """Transactional scope over sessions from ``factory``."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    with session_scope(SessionLocal) as session:
        yield session


def init_db(bind: Engine | None = None) -> None:
    """Create all tables on ``bind`` (the configured engine by default)."""

    Base.metadata.create_all(bind=bind or engine)
