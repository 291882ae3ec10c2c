"""Database engine and transaction scopes for the ordering engine.

This module provides:
- Database: Connection manager with WAL mode for concurrent access
- Read sessions for queries outside a mutation
- Write transactions (BEGIN IMMEDIATE on SQLite) for every mutating call

Write transactions take the SQLite writer lock up front, so the reads an
operation performs (current index, max index) and the set-based updates that
follow see one consistent view. Waiting for the lock is bounded by the store's
busy timeout; there is no retry loop. Driver failures surface as StorageError.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError
from sqlmodel import Session, SQLModel, create_engine

from ordinal.core.errors import StorageError
from ordinal.models import OrderedItem, OrderedParent

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from ordinal.config.models import DatabaseConfig

logger = structlog.get_logger()

DEFAULT_BUSY_TIMEOUT_MS = 30000

_TABLES = [OrderedParent.__table__, OrderedItem.__table__]  # type: ignore[attr-defined]


class Database:
    """SQLAlchemy engine wrapper with SQLite pragmas and transaction scopes.

    Accepts either a SQLite file path or a full SQLAlchemy URL. SQLite-only
    behaviour (pragmas, BEGIN IMMEDIATE) is skipped for other dialects, which
    get a plain transaction at their default isolation level.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        *,
        url: str | None = None,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        echo: bool = False,
    ) -> None:
        if (db_path is None) == (url is None):
            raise ValueError("Pass exactly one of db_path or url")
        self.db_path = db_path
        self.url = url or f"sqlite:///{db_path}"
        self._busy_timeout_ms = busy_timeout_ms
        self.engine = self._create_engine(echo)

    @classmethod
    def from_config(cls, config: DatabaseConfig, project_root: Path | None = None) -> Database:
        """Build from DatabaseConfig; relative SQLite paths resolve against project_root."""
        if config.url:
            return cls(url=config.url, busy_timeout_ms=config.busy_timeout_ms, echo=config.echo)
        db_path = Path(config.path).expanduser()
        if not db_path.is_absolute():
            db_path = (project_root or Path.cwd()) / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return cls(db_path, busy_timeout_ms=config.busy_timeout_ms, echo=config.echo)

    @property
    def is_sqlite(self) -> bool:
        return self.engine.dialect.name == "sqlite"

    def _create_engine(self, echo: bool) -> Engine:
        connect_args: dict[str, Any] = {}
        if self.url.startswith("sqlite"):
            connect_args = {
                "check_same_thread": False,
                "timeout": self._busy_timeout_ms / 1000,
            }
        engine = create_engine(
            self.url,
            connect_args=connect_args,
            pool_pre_ping=True,
            echo=echo,
        )
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", self._configure_pragmas)
        return engine

    def _configure_pragmas(self, dbapi_conn: Any, _connection_record: Any) -> None:
        """Configure SQLite for concurrent access."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={int(self._busy_timeout_ms)}")
        cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    def create_all(self) -> None:
        """Create the ordering tables from SQLModel metadata."""
        SQLModel.metadata.create_all(self.engine, tables=_TABLES)

    def drop_all(self) -> None:
        """Drop the ordering tables. Use with caution."""
        SQLModel.metadata.drop_all(self.engine, tables=_TABLES)

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """ORM session for read-only queries."""
        try:
            with Session(self.engine) as session:
                yield session
        except DBAPIError as e:
            raise StorageError.from_exception(e, "read") from e

    @contextmanager
    def write_transaction(self, operation: str = "write") -> Generator[Session, None, None]:
        """
        Session wrapping exactly one write transaction.

        On SQLite the transaction starts with BEGIN IMMEDIATE, acquiring the
        RESERVED lock before the first read, blocking other writers but
        allowing readers.

        Commits on successful exit and rolls back on any exception; nothing
        is committed on an error path. Driver errors (lock timeout, broken
        connection, constraint failures) are re-raised as StorageError.

        Args:
            operation: Name used in logs and in StorageError details
        """
        try:
            with Session(self.engine) as session:
                if self.is_sqlite:
                    session.execute(text("BEGIN IMMEDIATE"))
                try:
                    yield session
                    session.commit()
                except Exception:
                    session.rollback()
                    raise
        except DBAPIError as e:
            logger.warning("write_transaction_failed", operation=operation, error=str(e))
            raise StorageError.from_exception(e, operation) from e
