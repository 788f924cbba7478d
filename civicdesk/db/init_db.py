"""Database initialization utilities."""
from typing import Optional

from sqlalchemy.engine import Engine

from civicdesk.core.logging import get_logger
from civicdesk.db.base import Base

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create all tables that do not exist yet.

    Note: suitable for development and tests; production schemas are
    managed by migrations.
    """
    if bind is None:
        from civicdesk.db.session import engine as bind

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured", extra={"tables": len(Base.metadata.tables)})
