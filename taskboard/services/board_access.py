"""
Board Access Service
Resolves a user's effective role on a board, entered via the board itself,
one of its lists, or one of its cards.
"""

from typing import Optional, Union
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.metrics import ACCESS_DECISIONS_TOTAL
from taskboard.core.references import expanded_value, parse_id
from taskboard.core.role_resolver import BoardRoleResolver, role_resolver
from taskboard.repositories.base import LookupFailedError
from taskboard.repositories.board import board_repository
from taskboard.repositories.board_list import board_list_repository
from taskboard.repositories.card import card_repository
from taskboard.repositories.workspace import workspace_repository
from taskboard.schemas.access import (
    AccessReason,
    BoardAccess,
    BoardSnapshot,
    CardAccess,
    CardSnapshot,
    ListAccess,
    ListSnapshot,
    WorkspaceSnapshot,
)

logger = structlog.get_logger()

IdInput = Union[UUID, str]


class BoardAccessService:
    """Read-only access resolution over the board lineage"""

    def __init__(
        self,
        boards=board_repository,
        lists=board_list_repository,
        cards=card_repository,
        workspaces=workspace_repository,
        resolver: BoardRoleResolver = role_resolver,
    ):
        self.boards = boards
        self.lists = lists
        self.cards = cards
        self.workspaces = workspaces
        self.resolver = resolver

    async def resolve_role(self, db: AsyncSession, board_id: IdInput, user_id: IdInput) -> BoardAccess:
        """
        Resolve the user's role on a board.

        Never raises for invalid input, missing rows or store failures; those
        come back as a denied BoardAccess carrying the reason.
        """
        parsed_board_id = parse_id(board_id)
        parsed_user_id = parse_id(user_id)
        if parsed_board_id is None or parsed_user_id is None:
            return BoardAccess.denied(AccessReason.INVALID_ID)

        try:
            return await self._resolve(db, parsed_board_id, parsed_user_id)
        except LookupFailedError as e:
            logger.error(
                "Board access check failed",
                board_id=str(parsed_board_id),
                user_id=str(parsed_user_id),
                error=str(e),
            )
            return BoardAccess.denied(AccessReason.LOOKUP_FAILED)

    async def resolve_via_board(self, db: AsyncSession, board_id: IdInput, user_id: IdInput) -> BoardAccess:
        return _record("board", await self.resolve_role(db, board_id, user_id))

    async def resolve_via_list(self, db: AsyncSession, list_id: IdInput, user_id: IdInput) -> ListAccess:
        """Resolve access on the board owning the list"""
        return _record("list", await self._via_list(db, list_id, user_id))

    async def resolve_via_card(self, db: AsyncSession, card_id: IdInput, user_id: IdInput) -> CardAccess:
        """Resolve access on the card's board"""
        return _record("card", await self._via_card(db, card_id, user_id))

    async def _via_list(self, db: AsyncSession, list_id: IdInput, user_id: IdInput) -> ListAccess:
        parsed_list_id = parse_id(list_id)
        if parsed_list_id is None:
            return ListAccess.denied(AccessReason.INVALID_ID)

        try:
            board_list = await self.lists.get(db, parsed_list_id, include_deleted=True)
        except LookupFailedError as e:
            logger.error("List lookup failed", list_id=str(parsed_list_id), error=str(e))
            return ListAccess.denied(AccessReason.LOOKUP_FAILED)

        if board_list is None:
            return ListAccess.denied(AccessReason.LIST_NOT_FOUND)

        snapshot = ListSnapshot.from_model(board_list)
        access = await self.resolve_role(db, snapshot.board_id, user_id)
        return ListAccess(
            has_access=access.has_access,
            role=access.role,
            board=access.board,
            reason=access.reason,
            board_list=snapshot,
        )

    async def _via_card(self, db: AsyncSession, card_id: IdInput, user_id: IdInput) -> CardAccess:
        parsed_card_id = parse_id(card_id)
        if parsed_card_id is None:
            return CardAccess.denied(AccessReason.INVALID_ID)

        try:
            card = await self.cards.get_with_board(db, parsed_card_id, include_deleted=True)
        except LookupFailedError as e:
            logger.error("Card lookup failed", card_id=str(parsed_card_id), error=str(e))
            return CardAccess.denied(AccessReason.LOOKUP_FAILED)

        if card is None:
            return CardAccess.denied(AccessReason.CARD_NOT_FOUND)

        snapshot = CardSnapshot.from_model(card)
        access = await self.resolve_role(db, snapshot.board_id, user_id)
        return CardAccess(
            has_access=access.has_access,
            role=access.role,
            board=access.board,
            reason=access.reason,
            card=snapshot,
        )

    async def _resolve(self, db: AsyncSession, board_id: UUID, user_id: UUID) -> BoardAccess:
        board = await self.boards.get_with_workspace(db, board_id)
        if board is None:
            return BoardAccess.denied(AccessReason.BOARD_NOT_FOUND)

        snapshot = BoardSnapshot.from_model(board)
        rule = self.resolver.board_rule(snapshot, user_id)
        if rule is None:
            workspace = await self._workspace_of(db, snapshot)
            rule = self.resolver.matching_rule(snapshot, workspace, user_id)

        if rule is None:
            logger.debug("Board access denied", board_id=str(board_id), user_id=str(user_id))
            return BoardAccess.denied(AccessReason.ACCESS_DENIED)

        logger.debug(
            "Board access granted",
            board_id=str(board_id),
            user_id=str(user_id),
            rule=rule.name,
            role=rule.role.value,
        )
        return BoardAccess.granted(snapshot, rule.role)

    async def _workspace_of(self, db: AsyncSession, board: BoardSnapshot) -> Optional[WorkspaceSnapshot]:
        workspace = expanded_value(board.workspace)
        if workspace is not None:
            return workspace

        record = await self.workspaces.get_with_members(db, board.workspace_id)
        if record is None:
            logger.warning(
                "Board workspace missing, workspace rules skipped",
                board_id=str(board.id),
                workspace_id=str(board.workspace_id),
            )
            return None
        return WorkspaceSnapshot.from_model(record)


def _record(entry_point: str, access):
    outcome = "granted" if access.has_access else access.reason.name.lower()
    ACCESS_DECISIONS_TOTAL.labels(entry_point=entry_point, outcome=outcome).inc()
    return access


board_access_service = BoardAccessService()
