# app/db/init_db.py
"""Database initialization utilities."""
from typing import Optional

from sqlalchemy.engine import Engine

from app.core.logging import get_logger
from app.db.base import Base

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create any missing tables.

    Note: This is suitable for development/testing only.
    For production, use Alembic migrations instead.
    """
    if bind is None:
        from app.db.session import engine as bind

    Base.metadata.create_all(bind=bind)
    logger.info(f"Database initialized with {len(Base.metadata.tables)} tables")


def drop_db(bind: Optional[Engine] = None) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Use with caution.
    Only for development/testing purposes.
    """
    if bind is None:
        from app.db.session import engine as bind

    Base.metadata.drop_all(bind=bind)
    logger.warning("All database tables dropped")

