"""Git operations on the project working tree."""

from pathlib import Path
from typing import Callable

import structlog

from skeleton_ops_manager.configuration.exceptions import CommandError, PreconditionError
from skeleton_ops_manager.tooling.process import run_command
from skeleton_ops_manager.utils.constants import ROBOTIC_COMMIT_SUFFIX
from skeleton_ops_manager.utils.github import parse_github_origin
from skeleton_ops_manager.utils.helpers import with_robotic_suffix

logger = structlog.get_logger(__name__)

Runner = Callable[..., str]


class GitRepository:
    """Runs git commands in the project directory."""

    def __init__(self, project_dir: Path, runner: Runner = run_command) -> None:
        self.project_dir = project_dir
        self.runner = runner

    def _git(self, args: list[str], quiet: bool = True) -> str:
        return self.runner("git", args, cwd=self.project_dir, quiet=quiet)

    def is_repo(self) -> bool:
        try:
            return self._git(["rev-parse", "--is-inside-work-tree"]).strip() == "true"
        except CommandError:
            return False

    def status(self, short: bool = False) -> str:
        return self._git(["status", *(["--short"] if short else []), "--porcelain"]).strip()

    def is_dirty(self) -> bool:
        return self.status(short=True) != ""

    def current_branch(self) -> str:
        """Name of the checked-out branch.

        Raises:
            PreconditionError: When HEAD is detached (on a tag or a specific commit).
        """
        try:
            branch = self._git(["symbolic-ref", "--short", "--quiet", "HEAD"]).strip()
        except CommandError as exc:
            raise PreconditionError("Not currently on any git branch.") from exc
        if not branch:
            raise PreconditionError("Not currently on any git branch.")
        return branch

    def origin_url(self) -> str:
        return self._git(["remote", "get-url", "origin"]).strip()

    def github_origin(self) -> tuple[str, str]:
        """`(owner, repo)` of the GitHub origin remote.

        Raises:
            PreconditionError: If there is no origin or it is not hosted on GitHub.
        """
        try:
            url = self.origin_url()
        except CommandError as exc:
            raise PreconditionError("Repo does not have a GitHub origin.") from exc
        origin = parse_github_origin(url)
        if origin is None:
            raise PreconditionError("Repo does not have a GitHub origin.")
        return origin

    def has_github_origin(self) -> bool:
        try:
            self.github_origin()
        except PreconditionError:
            return False
        return True

    def add_commit(self, message: str) -> None:
        self._git(["add", "--all"], quiet=False)
        self._git(["commit", "--message", with_robotic_suffix(message, ROBOTIC_COMMIT_SUFFIX)], quiet=False)

    def tag(self, version: str, message: str) -> None:
        """Create the annotated tag `v<version>`."""
        if not version:
            raise PreconditionError("Package version is empty.")
        self._git(["tag", "--annotate", f"v{version}", "--message", with_robotic_suffix(message, ROBOTIC_COMMIT_SUFFIX)], quiet=False)

    def push(self) -> None:
        self._git(["push", "--set-upstream", "origin", self.current_branch()], quiet=False)
        self._git(["push", "origin", "--tags"], quiet=False)

    def add_commit_tag_push(self, version: str, message: str) -> None:
        self.add_commit(message)
        self.tag(version, message)
        self.push()
