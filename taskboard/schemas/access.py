"""
Access Schemas
Read-only snapshots of the board lineage and access decisions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from taskboard.core.board_roles import BoardRole
from taskboard.core.references import Expanded, IdRef, Reference, reference_id


def _member_ids(obj: Any) -> frozenset:
    return frozenset(member.id for member in (getattr(obj, "members", None) or []))


@dataclass(frozen=True)
class WorkspaceSnapshot:
    id: UUID
    name: str
    owner_id: UUID
    member_ids: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_model(cls, workspace: Any) -> "WorkspaceSnapshot":
        return cls(
            id=workspace.id,
            name=workspace.name,
            owner_id=workspace.owner_id,
            member_ids=_member_ids(workspace),
        )


@dataclass(frozen=True)
class BoardSnapshot:
    id: UUID
    title: str
    owner_id: UUID
    workspace: Reference[WorkspaceSnapshot]
    member_ids: frozenset = field(default_factory=frozenset)
    is_deleted: bool = False

    @property
    def workspace_id(self) -> UUID:
        return reference_id(self.workspace)

    @classmethod
    def from_model(cls, board: Any) -> "BoardSnapshot":
        workspace = getattr(board, "workspace", None)
        if workspace is not None:
            workspace_ref = Expanded(WorkspaceSnapshot.from_model(workspace))
        else:
            workspace_ref = IdRef(board.workspace_id)
        return cls(
            id=board.id,
            title=board.title,
            owner_id=board.owner_id,
            workspace=workspace_ref,
            member_ids=_member_ids(board),
            is_deleted=bool(board.is_deleted),
        )


@dataclass(frozen=True)
class ListSnapshot:
    id: UUID
    title: str
    board: Reference[BoardSnapshot]
    is_deleted: bool = False

    @property
    def board_id(self) -> UUID:
        return reference_id(self.board)

    @classmethod
    def from_model(cls, board_list: Any) -> "ListSnapshot":
        return cls(
            id=board_list.id,
            title=board_list.title,
            board=IdRef(board_list.board_id),
            is_deleted=bool(board_list.is_deleted),
        )


@dataclass(frozen=True)
class CardSnapshot:
    id: UUID
    title: str
    list_id: UUID
    board: Reference[BoardSnapshot]
    member_ids: frozenset = field(default_factory=frozenset)
    due_date: Optional[datetime] = None
    completed: bool = False
    is_deleted: bool = False
    created_by_id: Optional[UUID] = None

    @property
    def board_id(self) -> UUID:
        return reference_id(self.board)

    @classmethod
    def from_model(cls, card: Any) -> "CardSnapshot":
        return cls(
            id=card.id,
            title=card.title,
            list_id=card.list_id,
            board=IdRef(card.board_id),
            member_ids=_member_ids(card),
            due_date=card.due_date,
            completed=bool(card.completed),
            is_deleted=bool(card.is_deleted),
            created_by_id=card.created_by_id,
        )


class AccessReason(str, Enum):
    INVALID_ID = "invalid id"
    BOARD_NOT_FOUND = "board not found"
    LIST_NOT_FOUND = "list not found"
    CARD_NOT_FOUND = "card not found"
    ACCESS_DENIED = "no permission to access this board"
    LOOKUP_FAILED = "error checking access"

    @property
    def is_not_found(self) -> bool:
        return self in (AccessReason.BOARD_NOT_FOUND, AccessReason.LIST_NOT_FOUND, AccessReason.CARD_NOT_FOUND)


@dataclass(frozen=True)
class BoardAccess:
    has_access: bool
    role: Optional[BoardRole] = None
    board: Optional[BoardSnapshot] = None
    reason: Optional[AccessReason] = None

    @property
    def decision(self) -> tuple[bool, Optional[BoardRole]]:
        return self.has_access, self.role

    @classmethod
    def granted(cls, board: BoardSnapshot, role: BoardRole) -> "BoardAccess":
        return cls(has_access=True, role=role, board=board)

    @classmethod
    def denied(cls, reason: AccessReason) -> "BoardAccess":
        return cls(has_access=False, reason=reason)


@dataclass(frozen=True)
class ListAccess(BoardAccess):
    board_list: Optional[ListSnapshot] = None


@dataclass(frozen=True)
class CardAccess(BoardAccess):
    card: Optional[CardSnapshot] = None


class AccessResponse(BaseModel):
    """Resolved access of the current user on a board"""
    has_access: bool = Field(..., description="Whether the user can see the board")
    role: Optional[BoardRole] = Field(None, description="Effective board role")
    reason: Optional[str] = Field(None, description="Why access was not granted")
    board_id: Optional[UUID] = Field(None, description="Owning board")
    list_id: Optional[UUID] = Field(None, description="List used as entry point")
    card_id: Optional[UUID] = Field(None, description="Card used as entry point")

    @classmethod
    def from_access(cls, access: BoardAccess) -> "AccessResponse":
        list_snapshot = getattr(access, "board_list", None)
        card_snapshot = getattr(access, "card", None)
        return cls(
            has_access=access.has_access,
            role=access.role,
            reason=access.reason.value if access.reason else None,
            board_id=access.board.id if access.board else None,
            list_id=list_snapshot.id if list_snapshot else None,
            card_id=card_snapshot.id if card_snapshot else None,
        )
