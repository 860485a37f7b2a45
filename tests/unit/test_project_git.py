"""Unit tests for git operations on the project working tree."""

from pathlib import Path

import pytest
from conftest import FakeRunner

from skeleton_ops_manager.configuration.exceptions import CommandError, PreconditionError
from skeleton_ops_manager.project.git import GitRepository


def test_github_origin_parses_remote(tmp_path: Path) -> None:
    """Test reading the owner and repository from the origin remote."""
    runner = FakeRunner({("git", "remote", "get-url", "origin"): "git@github.com:clevercanyon/skeleton-demo.git\n"})

    assert GitRepository(tmp_path, runner=runner).github_origin() == ("clevercanyon", "skeleton-demo")


@pytest.mark.parametrize(
    "response",
    [
        pytest.param("https://gitlab.com/clevercanyon/skeleton-demo.git\n", id="not github"),
        pytest.param(CommandError(["git", "remote"], 2, stderr="error: No such remote 'origin'"), id="no origin"),
    ],
)
def test_github_origin_missing(tmp_path: Path, response: object) -> None:
    """Test that a missing or foreign origin is a precondition error."""
    git = GitRepository(tmp_path, runner=FakeRunner({("git", "remote", "get-url", "origin"): response}))

    with pytest.raises(PreconditionError, match="GitHub origin"):
        git.github_origin()
    assert git.has_github_origin() is False


def test_is_dirty(tmp_path: Path) -> None:
    """Test that porcelain output means uncommitted changes."""
    assert GitRepository(tmp_path, runner=FakeRunner({("git", "status"): " M package.json\n"})).is_dirty() is True
    assert GitRepository(tmp_path, runner=FakeRunner({("git", "status"): ""})).is_dirty() is False


def test_current_branch_detached_head(tmp_path: Path) -> None:
    """Test that a detached HEAD is reported as not being on a branch."""
    runner = FakeRunner({("git", "symbolic-ref"): CommandError(["git", "symbolic-ref"], 1)})

    with pytest.raises(PreconditionError, match="branch"):
        GitRepository(tmp_path, runner=runner).current_branch()


def test_is_repo_outside_work_tree(tmp_path: Path) -> None:
    """Test that a failing rev-parse means not a git repo."""
    runner = FakeRunner({("git", "rev-parse"): CommandError(["git", "rev-parse"], 128, stderr="fatal: not a git repository")})

    assert GitRepository(tmp_path, runner=runner).is_repo() is False


def test_add_commit_tag_push(tmp_path: Path) -> None:
    """Test the commands of a release commit, with robotic messages and a `v` tag."""
    runner = FakeRunner({("git", "symbolic-ref"): "main\n"})

    GitRepository(tmp_path, runner=runner).add_commit_tag_push("1.2.3", "Release v1.2.3.")

    assert ["git", "add", "--all"] in runner.commands
    assert ["git", "commit", "--message", "Release v1.2.3. [robotic]"] in runner.commands
    assert ["git", "tag", "--annotate", "v1.2.3", "--message", "Release v1.2.3. [robotic]"] in runner.commands
    assert ["git", "push", "--set-upstream", "origin", "main"] in runner.commands
    assert runner.commands[-1] == ["git", "push", "origin", "--tags"]


def test_tag_requires_version(tmp_path: Path) -> None:
    """Test that tagging without a version is a precondition error."""
    with pytest.raises(PreconditionError):
        GitRepository(tmp_path, runner=FakeRunner()).tag("", "Release.")
