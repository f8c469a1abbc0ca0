"""
Board Repository
Lookups for boards together with their workspace lineage
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.models.board import Board
from taskboard.models.workspace import Workspace
from taskboard.repositories.base import CRUDBase

logger = structlog.get_logger()


class BoardRepository(CRUDBase[Board]):
    """Repository for board database operations"""

    async def get_with_workspace(
        self,
        db: AsyncSession,
        board_id: UUID,
        include_deleted: bool = True,
    ) -> Optional[Board]:
        """
        Get a board with members, workspace and workspace members loaded.

        Soft-deleted boards are returned by default; callers that want them
        hidden filter on is_deleted themselves.
        """
        query = (
            self._base_query(include_deleted)
            .where(Board.id == board_id)
            .options(
                selectinload(Board.members),
                selectinload(Board.workspace).selectinload(Workspace.members),
            )
        )
        return await self._fetch_one(db, query, id=board_id)


board_repository = BoardRepository(Board)
