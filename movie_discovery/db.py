"""Database session management and the key-value store built on it."""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Callable, Iterator, Protocol

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from movie_discovery.models import Base, KeyValueEntry


def _database_url() -> str:
    """Return the SQLAlchemy URL from env (defaults to local SQLite for dev)."""
    return os.getenv("DATABASE_URL", "sqlite:///./movie_discovery.db")


engine = create_engine(_database_url(), future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_models(bind=None) -> None:
    """Create tables if they do not exist (handy for local dev)."""
    Base.metadata.create_all(bind=bind or engine)


class PersistenceError(Exception):
    """Raised when the key-value store cannot be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


@contextmanager
def session_scope(factory: Callable[[], Session] = SessionLocal) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on failure."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


class SqlKeyValueStore:
    """Synchronous string get/set backed by the ``kv_entries`` table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        try:
            with session_scope(self._session_factory) as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to read key '{key}': {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to write key '{key}': {exc}") from exc
