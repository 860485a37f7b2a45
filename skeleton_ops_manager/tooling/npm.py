"""Wrapper around the npm command line interface."""

import json
import re
from pathlib import Path
from typing import Any, Callable

import structlog

from skeleton_ops_manager.configuration.exceptions import CommandError, RemoteResponseShapeError
from skeleton_ops_manager.tooling.process import run_command

logger = structlog.get_logger(__name__)

PERMISSION_DENIED_PATTERN = re.compile(r"\bE40[13]\b|\b40[13]\s+(?:Forbidden|Unauthorized)\b", re.IGNORECASE)
"""npm's way of reporting that the user may not perform an org/team operation."""

NOT_FOUND_PATTERN = re.compile(r"\bE404\b|\b404\s+Not Found\b", re.IGNORECASE)
"""npm's way of reporting that a team has no access to the package (or the package is not yet published)."""

Runner = Callable[..., str]


class NpmCli:
    """Runs npm subcommands in the project directory.

    The npm token is handed to the child process as `NPM_TOKEN`, which the
    project's `.npmrc` references.
    """

    def __init__(self, project_dir: Path, npm_token: str | None = None, runner: Runner = run_command) -> None:
        self.project_dir = project_dir
        self.npm_token = npm_token
        self.runner = runner

    def _run(self, args: list[str], quiet: bool = True) -> str:
        env = {"NPM_TOKEN": self.npm_token} if self.npm_token else None
        return self.runner("npm", args, cwd=self.project_dir, env=env, quiet=quiet)

    def _run_json(self, args: list[str]) -> Any:
        output = self._run(args)
        try:
            return json.loads(output)
        except json.JSONDecodeError as exc:
            raise RemoteResponseShapeError(f"npm {' '.join(args)}", f"invalid JSON output: {exc}") from exc

    # Organization and team access
    def org_members(self, org: str) -> dict[str, str]:
        """Members of an org keyed by username; values are `developer`, `admin`, or `owner`."""
        members = self._run_json(["org", "ls", org, "--json"])
        if not isinstance(members, dict):
            raise RemoteResponseShapeError(f"npm org ls {org}", "expected an object keyed by username")
        return members

    def user_can_admin_org(self, org: str) -> bool:
        """Whether the current user can administer `org`.

        Only admins and owners may list org members, so a permission failure listing
        them means "not an admin". Any other failure (network, missing npm) propagates.
        """
        try:
            self.org_members(org)
        except CommandError as exc:
            if PERMISSION_DENIED_PATTERN.search(exc.stderr) or PERMISSION_DENIED_PATTERN.search(exc.stdout):
                logger.info("Current npm user cannot administer organization", org=org)
                return False
            raise
        return True

    def org_teams(self, org: str) -> dict[str, str]:
        """Teams of an org keyed by bare team name (without the `@org:` prefix)."""
        teams = self._run_json(["team", "ls", org, "--json"])
        if not isinstance(teams, list) or not all(isinstance(team, str) for team in teams):
            raise RemoteResponseShapeError(f"npm team ls {org}", "expected a list of team names")
        return {re.sub(r"^[^:]+:", "", team): team for team in teams}

    def grant_access(self, permission: str, org: str, team: str) -> None:
        self._run(["access", "grant", permission, f"{org}:{team}"])

    def revoke_access(self, org: str, team: str) -> bool:
        """Revoke a team's access to the package. Returns False when the team had no access to revoke.

        Raises:
            CommandError: On any other failure, such as a network or authentication error.
        """
        try:
            self._run(["access", "revoke", f"{org}:{team}"])
        except CommandError as exc:
            if NOT_FOUND_PATTERN.search(exc.stderr) or NOT_FOUND_PATTERN.search(exc.stdout):
                return False
            raise
        return True

    # Registry
    def registry(self) -> str:
        return self._run(["config", "get", "registry"]).strip().rstrip("/")

    def is_registry(self, registry: str) -> bool:
        return self.registry() == registry.rstrip("/")

    # Package lifecycle
    def publish(self) -> None:
        self._run(["publish"], quiet=False)
