"""
Tests for the ordered board role rules
"""

from dataclasses import FrozenInstanceError
from types import SimpleNamespace
from uuid import uuid4

import pytest

from taskboard.core.board_roles import BoardRole
from taskboard.core.role_resolver import DEFAULT_ROLE_RULES, BoardRoleResolver, RoleRule, role_resolver
from taskboard.schemas.access import BoardSnapshot, WorkspaceSnapshot

from conftest import make_board, make_workspace


def _user(user_id):
    return SimpleNamespace(id=user_id)


@pytest.fixture
def people():
    return {name: uuid4() for name in ("board_owner", "board_member", "ws_owner", "ws_member", "stranger")}


@pytest.fixture
def lineage(people):
    workspace = make_workspace(
        people["ws_owner"],
        members=[_user(people["ws_member"]), _user(people["board_member"])],
    )
    board = make_board(people["board_owner"], workspace=workspace, members=[_user(people["board_member"])])
    snapshot = BoardSnapshot.from_model(board)
    return snapshot, snapshot.workspace.value


class TestRuleOrder:

    def test_default_rule_names(self):
        assert [rule.name for rule in DEFAULT_ROLE_RULES] == [
            "board_owner", "board_member", "workspace_owner", "workspace_member",
        ]

    @pytest.mark.parametrize("who,expected", [
        ("board_owner", BoardRole.OWNER),
        ("board_member", BoardRole.EDITOR),
        ("ws_owner", BoardRole.EDITOR),
        ("ws_member", BoardRole.VIEWER),
        ("stranger", None),
    ])
    def test_roles(self, people, lineage, who, expected):
        board, workspace = lineage
        assert role_resolver.resolve(board, workspace, people[who]) == expected

    def test_board_owner_wins_over_everything(self, people):
        owner = people["board_owner"]
        workspace = make_workspace(owner, members=[_user(owner)])
        board = BoardSnapshot.from_model(make_board(owner, workspace=workspace, members=[_user(owner)]))
        rule = role_resolver.matching_rule(board, board.workspace.value, owner)
        assert rule.name == "board_owner"
        assert rule.role == BoardRole.OWNER

    def test_board_member_beats_workspace_member(self, people, lineage):
        board, workspace = lineage
        # board_member is also a workspace member
        assert people["board_member"] in workspace.member_ids
        assert role_resolver.resolve(board, workspace, people["board_member"]) == BoardRole.EDITOR

    def test_workspace_owner_who_is_also_member(self, people):
        ws_owner = people["ws_owner"]
        workspace = make_workspace(ws_owner, members=[_user(ws_owner)])
        board = BoardSnapshot.from_model(make_board(people["board_owner"], workspace=workspace))
        assert role_resolver.resolve(board, board.workspace.value, ws_owner) == BoardRole.EDITOR


class TestMissingWorkspace:

    def test_workspace_rules_skipped(self, people, lineage):
        board, _ = lineage
        assert role_resolver.resolve(board, None, people["ws_owner"]) is None
        assert role_resolver.resolve(board, None, people["ws_member"]) is None

    def test_board_rules_still_apply(self, people, lineage):
        board, _ = lineage
        assert role_resolver.resolve(board, None, people["board_owner"]) == BoardRole.OWNER
        assert role_resolver.resolve(board, None, people["board_member"]) == BoardRole.EDITOR


class TestBoardRule:

    @pytest.mark.parametrize("who,expected", [
        ("board_owner", "board_owner"),
        ("board_member", "board_member"),
        ("ws_owner", None),
        ("ws_member", None),
        ("stranger", None),
    ])
    def test_decided_without_workspace(self, people, lineage, who, expected):
        board, _ = lineage
        rule = role_resolver.board_rule(board, people[who])
        assert (rule.name if rule else None) == expected

    def test_stops_at_first_workspace_rule(self, people, lineage):
        board, _ = lineage
        always = lambda b, w, u: True
        resolver = BoardRoleResolver([
            RoleRule("workspace_first", always, BoardRole.VIEWER, needs_workspace=True),
            RoleRule("board_owner", always, BoardRole.OWNER),
        ])
        assert resolver.board_rule(board, people["board_owner"]) is None
        assert resolver.resolve(board, None, people["board_owner"]) == BoardRole.VIEWER

    def test_workspace_rules_are_flagged(self):
        flagged = [rule.name for rule in DEFAULT_ROLE_RULES if rule.needs_workspace]
        assert flagged == ["workspace_owner", "workspace_member"]


class TestCustomRules:

    def test_rules_are_evaluated_in_order(self, people, lineage):
        board, workspace = lineage
        always = lambda b, w, u: True
        resolver = BoardRoleResolver([
            RoleRule("first", always, BoardRole.VIEWER),
            RoleRule("second", always, BoardRole.OWNER),
        ])
        assert resolver.resolve(board, workspace, people["stranger"]) == BoardRole.VIEWER

    def test_empty_rules_grant_nothing(self, people, lineage):
        board, workspace = lineage
        assert BoardRoleResolver([]).resolve(board, workspace, people["board_owner"]) is None

    def test_rules_are_immutable(self):
        resolver = BoardRoleResolver()
        assert isinstance(resolver.rules, tuple)
        assert resolver.rules == DEFAULT_ROLE_RULES


def test_snapshots_are_frozen(lineage):
    board, workspace = lineage
    with pytest.raises(FrozenInstanceError):
        board.owner_id = uuid4()
    assert isinstance(workspace, WorkspaceSnapshot)
