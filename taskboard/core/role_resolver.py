"""
Board role resolution.

A user's role on a board is never stored; it is derived from board and
workspace ownership/membership. Rules are evaluated in order and the first
match wins:

1. board owner      -> OWNER
2. board member     -> EDITOR
3. workspace owner  -> EDITOR
4. workspace member -> VIEWER

Rules 1 and 2 are decided from the board alone, so the workspace is only
needed when neither matches. Rules 3 and 4 are skipped when the board's
workspace cannot be resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from uuid import UUID

from taskboard.core.board_roles import BoardRole
from taskboard.schemas.access import BoardSnapshot, WorkspaceSnapshot

RolePredicate = Callable[[BoardSnapshot, Optional[WorkspaceSnapshot], UUID], bool]


@dataclass(frozen=True)
class RoleRule:
    name: str
    predicate: RolePredicate
    role: BoardRole
    needs_workspace: bool = False


def _is_board_owner(board: BoardSnapshot, workspace: Optional[WorkspaceSnapshot], user_id: UUID) -> bool:
    return board.owner_id == user_id


def _is_board_member(board: BoardSnapshot, workspace: Optional[WorkspaceSnapshot], user_id: UUID) -> bool:
    return user_id in board.member_ids


def _is_workspace_owner(board: BoardSnapshot, workspace: Optional[WorkspaceSnapshot], user_id: UUID) -> bool:
    return workspace is not None and workspace.owner_id == user_id


def _is_workspace_member(board: BoardSnapshot, workspace: Optional[WorkspaceSnapshot], user_id: UUID) -> bool:
    return workspace is not None and user_id in workspace.member_ids


DEFAULT_ROLE_RULES: tuple[RoleRule, ...] = (
    RoleRule("board_owner", _is_board_owner, BoardRole.OWNER),
    RoleRule("board_member", _is_board_member, BoardRole.EDITOR),
    RoleRule("workspace_owner", _is_workspace_owner, BoardRole.EDITOR, needs_workspace=True),
    RoleRule("workspace_member", _is_workspace_member, BoardRole.VIEWER, needs_workspace=True),
)


class BoardRoleResolver:
    def __init__(self, rules: Sequence[RoleRule] = DEFAULT_ROLE_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[RoleRule, ...]:
        return self._rules

    def resolve(
        self,
        board: BoardSnapshot,
        workspace: Optional[WorkspaceSnapshot],
        user_id: UUID,
    ) -> Optional[BoardRole]:
        rule = self.matching_rule(board, workspace, user_id)
        return rule.role if rule else None

    def matching_rule(
        self,
        board: BoardSnapshot,
        workspace: Optional[WorkspaceSnapshot],
        user_id: UUID,
    ) -> Optional[RoleRule]:
        for rule in self._rules:
            if rule.predicate(board, workspace, user_id):
                return rule
        return None

    def board_rule(self, board: BoardSnapshot, user_id: UUID) -> Optional[RoleRule]:
        """
        First match among the rules ahead of any workspace rule.

        None means the decision depends on the workspace (or nothing matches).
        """
        for rule in self._rules:
            if rule.needs_workspace:
                return None
            if rule.predicate(board, None, user_id):
                return rule
        return None


role_resolver = BoardRoleResolver()
