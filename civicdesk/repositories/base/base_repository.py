"""
Base repository with standardized data access for all domain repositories.

Repositories never commit: the calling service owns the unit of work and
decides whether flushed changes are committed or rolled back together.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import ResourceNotFoundError
from civicdesk.core.logging import get_logger
from civicdesk.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one mapped model.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Create Operations ====================

    def add(self, entity: ModelType) -> ModelType:
        """
        Stage an entity and flush so constraint violations surface now.

        Raises:
            sqlalchemy.exc.IntegrityError: On constraint violation; the
                session must then be rolled back by the caller.
        """
        self.db.add(entity)
        self.db.flush()
        logger.debug(f"Flushed {self.model.__name__} with id: {entity.id}")
        return entity

    # ==================== Read Operations ====================

    def find_by_id(self, id: str, *, for_update: bool = False) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID
            for_update: Lock the row for the rest of the transaction on
                backends that support it

        Returns:
            Entity or None
        """
        stmt = select(self.model).where(self.model.id == id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id(self, id: str, *, for_update: bool = False) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id, for_update=for_update)
        if entity is None:
            raise ResourceNotFoundError(self.model.__name__)
        return entity

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.filter_by(**criteria)
        return int(self.db.execute(stmt).scalar_one())
