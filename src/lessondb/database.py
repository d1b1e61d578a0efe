"""Storage gateway: the single synchronization point for the embedded store."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import structlog
from sqlalchemy import Engine, Table, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from lessondb.db import models  # noqa: F401  registers every collection on Base.metadata
from lessondb.db.base import Base
from lessondb.errors import GatewayClosedError

if TYPE_CHECKING:
    from types import TracebackType

    from lessondb.config import Settings

logger = structlog.get_logger()

T = TypeVar("T")


class StorageGateway:
    """Owns the store file and runs units of work against it.

    Every unit of work runs in its own transaction while holding a
    process-local lock. Transactions start with ``BEGIN IMMEDIATE``, so the
    SQLite write lock is taken before the first read and read-then-write
    sequences are never interleaved with another connection's writes, even
    from another process.
    """

    def __init__(self, url: str, *, busy_timeout: float = 5.0) -> None:
        self.url = url
        self._busy_timeout = busy_timeout
        self._lock = threading.RLock()
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> StorageGateway:
        return cls(
            settings.resolved_database_url(),
            busy_timeout=settings.sqlite_busy_timeout_seconds,
        )

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> None:
        """Open the store file and ensure every collection and index exists."""
        with self._lock:
            if self._engine is not None:
                return

            database = make_url(self.url).database
            if database and database != ":memory:":
                Path(database).parent.mkdir(parents=True, exist_ok=True)

            self._engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False, "timeout": self._busy_timeout},
            )
            _begin_immediate(self._engine)
            self._session_factory = sessionmaker(self._engine, expire_on_commit=False)
            Base.metadata.create_all(self._engine)
            logger.info("store_opened", url=self.url)

    def close(self) -> None:
        """Dispose of the engine. Safe to call more than once."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                self._session_factory = None
                logger.info("store_closed", url=self.url)

    def __enter__(self) -> StorageGateway:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def run(self, work: Callable[[Session], T]) -> T:
        """Run ``work`` against an open session as one transaction.

        Commits when ``work`` returns and rolls back when it raises. Errors
        are never retried here; they propagate to the caller.
        """
        with self._lock:
            if self._session_factory is None:
                msg = "Store is not open. Call open() first."
                raise GatewayClosedError(msg)
            with self._session_factory() as session:
                try:
                    result = work(session)
                    session.commit()
                except Exception:
                    session.rollback()
                    raise
                return result

    @staticmethod
    def drop_collection(session: Session, table: Table) -> None:
        """Drop one collection and recreate it empty, inside the current unit of work."""
        connection = session.connection()
        table.drop(connection, checkfirst=True)
        table.create(connection)
        logger.warning("collection_dropped", collection=table.name)


def _begin_immediate(engine: Engine) -> None:
    """Take over transaction control from pysqlite and start every transaction with ``BEGIN IMMEDIATE``.

    pysqlite defers ``BEGIN`` until the first write, so a read-then-write
    unit of work would otherwise hold no lock while it reads.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")
