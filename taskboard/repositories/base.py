"""
Base Repository
Generic lookups shared by the board lineage repositories
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
import structlog

from taskboard.core.database import Base

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=Base)


class LookupFailedError(Exception):
    """The store could not answer a lookup (unreachable, query error)"""

    def __init__(self, model: str, id: Any = None, cause: Optional[BaseException] = None):
        self.model = model
        self.id = id
        self.cause = cause
        super().__init__(f"{model} lookup failed" + (f" for {id}" if id is not None else ""))


class CRUDBase(Generic[ModelType]):
    """
    Base repository with generic database operations
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize repository

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def _base_query(self, include_deleted: bool):
        query = select(self.model)
        if hasattr(self.model, 'is_deleted') and not include_deleted:
            query = query.where(self.model.is_deleted == False)
        return query

    async def get(
        self,
        db: AsyncSession,
        id: Union[UUID, str],
        include_deleted: bool = False
    ) -> Optional[ModelType]:
        """
        Get a single record by ID

        Args:
            db: Database session
            id: Record ID
            include_deleted: Include soft-deleted records

        Returns:
            Model instance or None

        Raises:
            LookupFailedError: If the query could not be executed
        """
        query = self._base_query(include_deleted).where(self.model.id == id)
        return await self._fetch_one(db, query, id=id)

    async def _fetch_one(self, db: AsyncSession, query, id: Any = None) -> Optional[ModelType]:
        try:
            result = await db.execute(query)
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Error retrieving record", model=self.model.__name__, id=str(id), error=str(e))
            raise LookupFailedError(self.model.__name__, id=id, cause=e) from e

        if record:
            logger.debug("Record retrieved", model=self.model.__name__, id=str(id))
        else:
            logger.debug("Record not found", model=self.model.__name__, id=str(id))
        return record

    async def create(
        self,
        db: AsyncSession,
        obj_in_data: Dict[str, Any],
        commit: bool = True
    ) -> ModelType:
        """
        Create a new record from dict data

        Args:
            db: Database session
            obj_in_data: Column values
            commit: Whether to commit the transaction

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in_data)
            db.add(db_obj)

            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()

            logger.info("Record created", model=self.model.__name__, id=str(db_obj.id))
            return db_obj

        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error creating record", model=self.model.__name__, error=str(e))
            raise
