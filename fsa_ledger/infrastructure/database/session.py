"""Database session management: the LedgerStore handle and its transactional scopes"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from fsa_ledger.config import settings
from fsa_ledger.infrastructure.database.models import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine with pooling suited to the backend"""
    if database_url.startswith("sqlite"):
        # Starlette runs sync handlers on a thread pool
        return create_engine(database_url, connect_args={"check_same_thread": False})

    # Connection pool: recycle after pool_recycle seconds to avoid stale connections
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
    )


class LedgerStore:
    """
    Handle on the account ledger database.

    Created once at process start and passed to every component that needs
    it; dispose() releases pooled connections at shutdown.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        self.engine = engine or build_engine(database_url or settings.database_url)
        # expire_on_commit=False keeps loaded rows readable after the scope closes
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_schema(self) -> None:
        """Create all tables that do not exist yet"""
        Base.metadata.create_all(bind=self.engine)

    def drop_schema(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Ledger store disposed", extra={"url": self.engine.url.render_as_string(hide_password=True)})

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Scoped unit of work: commit on normal exit, roll back on any exception.

        The session is closed on every exit path.
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def read_session(self) -> Iterator[Session]:
        """
        Session for read-only work; never commits.

        close() detaches loaded rows without expiring them, so results stay
        readable after the block exits.
        """
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()
