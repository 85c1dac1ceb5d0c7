# backend/app/db/session.py
"""
Database engine and transactional session management for SQLAlchemy.

Engine configuration:
- In-memory SQLite (the default) uses StaticPool: the database only exists
  on its one connection, so every session must share it
- File SQLite uses NullPool with check_same_thread=False (sessions are
  opened from FastAPI's worker threads)
- Anything else gets the default pool with pre-ping

Transactions:
- Database.transaction() opens a session, begins, commits on success and
  rolls back on any exception
- Units of work are serialized on the database: SQLite allows a single
  writer and the in-memory database sits on a single shared connection
- A transaction opened while the same thread already holds one joins the
  outer one, so several service calls can commit or roll back together

Security considerations:
- DATABASE_ECHO disabled by default (prevents SQL query exposure)
"""
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

# Registers every table on Base.metadata
from backend.app import models  # noqa: F401
from backend.app.core.config import Settings
from backend.app.db.base import Base

MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _create_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool if database_url in MEMORY_URLS else NullPool,
            connect_args={"check_same_thread": False},
        )

    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class Database:
    """
    Engine, session factory and transaction boundary for one database.

    Usage:
        database = Database("sqlite://")
        database.create_all()
        with database.transaction() as db:
            db.add(user)
            # commits when the block exits, rolls back if it raises
    """

    def __init__(self, database_url: str = "sqlite://", echo: bool = False):
        self.engine: Engine = _create_engine(database_url, echo)

        # expire_on_commit=False: objects stay readable after the session closes
        # autoflush=False: explicit flush control, prevents unexpected queries
        self.SessionLocal: sessionmaker[DbSession] = sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autoflush=False,
        )

        self._lock = threading.RLock()
        self._local = threading.local()

    @contextmanager
    def transaction(self) -> Iterator[DbSession]:
        current = getattr(self._local, "session", None)
        if current is not None:
            yield current
            return

        with self._lock:
            with self.SessionLocal() as session, session.begin():
                self._local.session = session
                try:
                    yield session
                finally:
                    self._local.session = None

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def create_database(settings: Settings) -> Database:
    """Build the database from settings and create any missing tables."""
    database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    database.create_all()
    return database
