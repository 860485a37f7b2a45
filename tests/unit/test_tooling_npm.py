"""Unit tests for the npm command line wrapper."""

import json
from pathlib import Path

import pytest
from conftest import FakeRunner

from skeleton_ops_manager.configuration.exceptions import CommandError, RemoteResponseShapeError
from skeleton_ops_manager.tooling.npm import NpmCli


def test_user_can_admin_org(tmp_path: Path) -> None:
    """Test that listing org members succeeds for admins."""
    runner = FakeRunner({("npm", "org", "ls"): json.dumps({"jaswrks": "owner"})})

    assert NpmCli(tmp_path, runner=runner).user_can_admin_org("@clevercanyon") is True


@pytest.mark.parametrize(
    "stderr",
    [
        pytest.param("npm ERR! code E403\nnpm ERR! 403 Forbidden", id="forbidden"),
        pytest.param("npm ERR! code E401\nnpm ERR! Unable to authenticate", id="unauthorized"),
    ],
)
def test_user_can_admin_org_permission_denied(tmp_path: Path, stderr: str) -> None:
    """Test that a permission failure means the user is not an admin."""
    runner = FakeRunner({("npm", "org", "ls"): CommandError(["npm", "org", "ls"], 1, stderr=stderr)})

    assert NpmCli(tmp_path, runner=runner).user_can_admin_org("@clevercanyon") is False


def test_user_can_admin_org_other_failures_propagate(tmp_path: Path) -> None:
    """Test that failures other than permission denial are raised."""
    runner = FakeRunner({("npm", "org", "ls"): CommandError(["npm", "org", "ls"], 1, stderr="npm ERR! code ENOTFOUND")})

    with pytest.raises(CommandError):
        NpmCli(tmp_path, runner=runner).user_can_admin_org("@clevercanyon")


def test_org_teams_strips_org_prefix(tmp_path: Path) -> None:
    """Test that team names are keyed without their org prefix."""
    runner = FakeRunner({("npm", "team", "ls"): json.dumps(["clevercanyon:developers", "clevercanyon:owners"])})

    assert list(NpmCli(tmp_path, runner=runner).org_teams("@clevercanyon")) == ["developers", "owners"]


def test_org_teams_shape_error(tmp_path: Path) -> None:
    """Test that unexpected output is a shape error."""
    runner = FakeRunner({("npm", "team", "ls"): json.dumps({"teams": []})})

    with pytest.raises(RemoteResponseShapeError):
        NpmCli(tmp_path, runner=runner).org_teams("@clevercanyon")


def test_npm_token_is_passed_to_child_only(tmp_path: Path) -> None:
    """Test that the token reaches npm through the child environment."""
    runner = FakeRunner()

    NpmCli(tmp_path, npm_token="npm-token", runner=runner).grant_access("read-write", "@clevercanyon", "developers")

    assert runner.commands == [["npm", "access", "grant", "read-write", "@clevercanyon:developers"]]
    assert runner.envs == [{"NPM_TOKEN": "npm-token"}]


def test_is_registry_ignores_trailing_slash(tmp_path: Path) -> None:
    """Test comparing the configured registry."""
    runner = FakeRunner({("npm", "config", "get", "registry"): "https://registry.npmjs.org/\n"})

    assert NpmCli(tmp_path, runner=runner).is_registry("https://registry.npmjs.org") is True


@pytest.mark.parametrize(
    "response, expected",
    [
        pytest.param("", True, id="revoked"),
        pytest.param(CommandError(["npm", "access", "revoke"], 1, stderr="npm ERR! code E404\nnpm ERR! 404 Not Found"), False, id="no access"),
    ],
)
def test_revoke_access(tmp_path: Path, response: object, expected: bool) -> None:
    """Test that a team without access is reported rather than raised."""
    runner = FakeRunner({("npm", "access", "revoke"): response})

    assert NpmCli(tmp_path, runner=runner).revoke_access("@clevercanyon", "contractors") is expected
