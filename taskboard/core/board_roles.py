"""
Board role definitions and the permission gate.

Hierarchy: viewer < editor < owner

- owner: full control (delete board, manage members, edit everything)
- editor: create/edit/delete lists and cards (board members, workspace owner)
- viewer: read-only (workspace members who are not board members)
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class BoardRole(str, Enum):
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]


ROLE_RANK: dict[BoardRole, int] = {
    BoardRole.VIEWER: 0,
    BoardRole.EDITOR: 1,
    BoardRole.OWNER: 2,
}


def has_permission(user_role: Optional[BoardRole], required_role: BoardRole) -> bool:
    """Return True when user_role is at least required_role; no role never passes."""
    if user_role is None:
        return False
    return ROLE_RANK[BoardRole(user_role)] >= ROLE_RANK[BoardRole(required_role)]


INSUFFICIENT_ROLE_MESSAGES: dict[BoardRole, str] = {
    BoardRole.VIEWER: "You only have view access to this board",
    BoardRole.EDITOR: "Board owner permission is required for this action",
}


def insufficient_role_message(current_role: BoardRole) -> str:
    return INSUFFICIENT_ROLE_MESSAGES.get(
        BoardRole(current_role), "You do not have sufficient permission for this action"
    )
