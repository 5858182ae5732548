"""SQLAlchemy engine/session handle for the statement database.

Usage
-----
from db.client import Database, database_url

database = Database(database_url())
with database.session_scope() as s:
    s.execute(...)
database.dispose()

The handle is constructed by the process entrypoint and passed to whatever
needs it; nothing in this library keeps a process-wide engine.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.finance import Base


def database_url(override: str | None = None) -> str:
    """Resolve the database URL from ``override`` or ``DATABASE_URL``."""

    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize database client")
    return url


class Database:
    """Owns one engine and its session factory."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        # pool_pre_ping guards against connections dropped by the server.
        self.engine: Engine = create_engine(url, pool_pre_ping=True, echo=echo)
        self._session_maker: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, class_=Session
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def session(self) -> Session:
        """Return a new session bound to this database."""

        return self._session_maker()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""

        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create missing tables from the ORM metadata (local/dev databases)."""

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def __repr__(self) -> str:
        return f"Database({self.engine.url.render_as_string(hide_password=True)!r})"


__all__ = [
    "Database",
    "database_url",
]
