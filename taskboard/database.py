"""Database configuration and session management."""

import logging
from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base: Any = declarative_base()


class Database:
    """Engine and session factory for the ORM path.

    Built once at application startup and disposed at shutdown; nothing in the
    data layer reaches for a module-level client.
    """

    def __init__(self, url: str, session_class: type[Session] = Session):
        self.url = url
        if url.startswith("sqlite"):
            self.engine = create_engine(url, connect_args={"check_same_thread": False})
        else:
            self.engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine, class_=session_class
        )

    def session(self) -> Session:
        """Open a new ORM session."""
        return self.session_factory()

    def init_schema(self) -> None:
        """Create all tables that do not exist yet."""
        # Import all models here so they are registered with Base.metadata
        from taskboard import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def count_users(self) -> int:
        """Round-trip to the database, used by the connectivity endpoint."""
        from taskboard.models.user import User

        with self.session() as session:
            return session.scalar(select(func.count()).select_from(User)) or 0

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
