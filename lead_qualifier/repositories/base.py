"""
Base repository with generic CRUD operations.
"""
import logging
import uuid
from typing import TypeVar, Generic, Type, Optional

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from lead_qualifier.core.exceptions import PersistenceError
from lead_qualifier.models.columns import utcnow

ModelType = TypeVar("ModelType", bound=SQLModel)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.

    Database errors are rolled back and re-raised as PersistenceError.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def _exec(self, query, operation: str = "Query"):
        try:
            return await self.session.exec(query)
        except SQLAlchemyError as e:
            await self._fail(operation, e)

    async def _commit(self, operation: str = "Commit"):
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail(operation, e)

    async def _fail(self, operation: str, error: SQLAlchemyError):
        await self.session.rollback()
        logger.error(f"{operation} on {self.model.__name__} failed: {error}")
        raise PersistenceError(operation, str(error)) from error

    async def save(self, db_obj: ModelType, operation: str = "Save") -> ModelType:
        """Add or update a record and commit."""
        self.session.add(db_obj)
        await self._commit(f"{operation} {self.model.__name__}")
        await self.session.refresh(db_obj)
        return db_obj

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        return await self.save(self.model(**obj_in), "Create")

    async def update(self, db_obj: ModelType, obj_in: dict) -> ModelType:
        """Update fields on a loaded record."""
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        # Update timestamp if exists
        if hasattr(db_obj, 'updated_at'):
            db_obj.updated_at = utcnow()

        return await self.save(db_obj, "Update")

    async def delete(self, db_obj: ModelType) -> None:
        """Delete a loaded record and commit."""
        await self.session.delete(db_obj)
        await self._commit(f"Delete {self.model.__name__}")

    async def count(self, org_id: Optional[uuid.UUID] = None) -> int:
        """Count records, optionally within one organization."""
        query = select(func.count()).select_from(self.model)
        if org_id and hasattr(self.model, 'org_id'):
            query = query.where(self.model.org_id == org_id)

        result = await self._exec(query, f"Count {self.model.__name__}")
        return result.one()
