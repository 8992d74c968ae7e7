"""
Base repository with common CRUD operations.

Provides generic database operations that can be inherited by specific repositories.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Repositories never commit; transaction boundaries belong to the caller.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def create(self, **data: Any) -> ModelType:
        """
        Create a new record and flush it.

        Args:
            **data: Field values for the new record

        Returns:
            Created model instance
        """
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """
        Get record by ID.

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_all(
        self, skip: int = 0, limit: int = 100, filters: Optional[Dict] = None
    ) -> List[ModelType]:
        """
        Get all records with optional equality filters.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            filters: Optional dict of field:value filters

        Returns:
            List of model instances
        """
        stmt = self._apply_filters(select(self.model), filters)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, filters: Optional[Dict] = None) -> int:
        """
        Count records with optional equality filters.
        """
        stmt = self._apply_filters(
            select(func.count()).select_from(self.model), filters
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def delete_all(self) -> int:
        """
        Hard delete every row of the table.

        Returns:
            Number of rows deleted
        """
        result = await self.session.execute(delete(self.model))
        return result.rowcount

    def _apply_filters(self, stmt, filters: Optional[Dict]):
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field):
                    stmt = stmt.where(getattr(self.model, field) == value)
        return stmt
