"""
Database handle and session management.

The registry never keeps a process-wide engine: callers build a Database,
hand its sessions to the crud operations and dispose of it when done.
"""
from contextlib import contextmanager
from typing import Generator, Optional
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from pkgregistry.core.config import Settings, settings as default_settings
from pkgregistry.core.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine plus session factory for one relational store."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        connect_args = {}
        # For production, use connection pooling; for testing, use NullPool
        poolclass = NullPool if "test" in url else None
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.engine: Engine = create_engine(
            url,
            poolclass=poolclass,
            echo=echo,
            connect_args=connect_args,
        )
        if url.startswith("sqlite"):
            # Cascades on names/versions/stars rely on enforced foreign keys
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        """Initialize database by creating all tables."""
        logger.info("Initializing database...")
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database initialized successfully")

    def drop_db(self) -> None:
        """Drop all tables (useful for testing/reset)."""
        logger.warning("Dropping all database tables...")
        Base.metadata.drop_all(bind=self.engine)
        logger.info("Database tables dropped")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.
        Usage:
            with database.session() as db:
                result = create_package(db, new_package)
        """
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get_db(self) -> Generator[Session, None, None]:
        """Session generator for request-scoped dependency injection."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        logger.debug("Database engine disposed")


def create_database(config: Optional[Settings] = None) -> Database:
    """Build a Database from settings."""
    config = config or default_settings
    return Database(config.database_url, echo=config.sql_echo)
