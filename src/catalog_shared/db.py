"""
Database handle shared by the catalog services.

The handle is constructed explicitly at startup and passed to whoever needs
storage; there is no module-level engine.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import AppConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class Database:
    """
    Owns the SQLAlchemy engine and session factory for one application.

    ``supports_transactions`` is injected from configuration and decides which
    booking committer the application wires up.
    """

    def __init__(
        self,
        database_url: str,
        supports_transactions: bool = True,
        slow_query_seconds: float = 1.0,
    ):
        self.database_url = database_url
        self.supports_transactions = supports_transactions
        self.slow_query_seconds = slow_query_seconds
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> Database:
        return cls(
            config.database_url,
            supports_transactions=config.get_bool("db_supports_transactions", True),
            slow_query_seconds=config.slow_query_seconds,
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> Engine:
        """Create the engine and session factory. Calling it twice is a no-op."""
        if self._engine is not None:
            return self._engine

        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True, "future": True}
        if self.database_url.startswith("sqlite"):
            engine_kwargs.update(
                {
                    "connect_args": {"check_same_thread": False},
                    "poolclass": StaticPool,
                    "pool_pre_ping": False,
                }
            )
        else:
            engine_kwargs.update({"pool_size": 10, "max_overflow": 20, "pool_recycle": 3600})

        engine = create_engine(self.database_url, **engine_kwargs)
        threshold = self.slow_query_seconds

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > threshold:
                logger.warning(f"Slow query detected ({total:.2f}s): {statement[:200]}...")

        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
        )
        logger.info("Database connected", extra={"transactions": self.supports_transactions})
        return engine

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    def create_schema(self, metadata) -> None:
        """Ensure all tables declared on the provided metadata exist."""
        try:
            metadata.create_all(self.engine)
            logger.info("Database schema created successfully")
        except OperationalError as exc:
            logger.warning("Schema creation warning: %s", exc)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block exits normally, rolls back and re-raises when
        it does not, and always closes the session.
        """
        if self._session_factory is None:
            raise RuntimeError("Session factory unavailable. Call connect() first.")

        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
