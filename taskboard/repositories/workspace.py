"""
Workspace Repository
Lookups for workspace ownership and membership
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.models.workspace import Workspace
from taskboard.repositories.base import CRUDBase

logger = structlog.get_logger()


class WorkspaceRepository(CRUDBase[Workspace]):
    """Repository for workspace database operations"""

    async def get_with_members(self, db: AsyncSession, workspace_id: UUID) -> Optional[Workspace]:
        """Get a workspace with its member set loaded"""
        query = (
            self._base_query(include_deleted=True)
            .where(Workspace.id == workspace_id)
            .options(selectinload(Workspace.members))
        )
        return await self._fetch_one(db, query, id=workspace_id)


workspace_repository = WorkspaceRepository(Workspace)
