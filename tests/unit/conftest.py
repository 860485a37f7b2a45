"""Fixtures for unit tests."""

import json
from pathlib import Path
from typing import Any, AsyncIterator, Generator

import pytest
import structlog
from nacl import encoding, public

from skeleton_ops_manager.configuration.models import BaseConfig, GitHubAuthenticationType, GitHubCredentials
from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.records import (
    AccountRecord,
    BranchPolicyRecord,
    BranchRecord,
    EnvironmentRecord,
    LabelRecord,
    PublicKeyRecord,
    ReleaseRecord,
    RepositoryPermissionsRecord,
    RepositoryRecord,
    SecretRecord,
    TeamRecord,
)


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


def make_repository(
    owner: str = "clevercanyon",
    owner_type: str = "Organization",
    admin: bool = True,
    default_branch: str = "main",
) -> RepositoryRecord:
    """Build a repository record as GitHub returns it for `owner/skeleton-demo`."""
    return RepositoryRecord(
        id=1,
        name="skeleton-demo",
        full_name=f"{owner}/skeleton-demo",
        default_branch=default_branch,
        owner=AccountRecord(login=owner, type=owner_type),
        organization=AccountRecord(login=owner, type="Organization") if owner_type == "Organization" else None,
        permissions=RepositoryPermissionsRecord(admin=admin, push=True, pull=True),
    )


class FakeGitHubAdapter(GitHubClientBase):
    """In-memory GitHub repository that records every mutation in `calls`.

    Listings are served two records per page so pagination is exercised.
    """

    page_size = 2

    def __init__(self, repository: RepositoryRecord | None = None) -> None:
        self.repository = repository or make_repository()
        self.calls: list[tuple[Any, ...]] = []
        self.labels: dict[str, LabelRecord] = {}
        self.teams: dict[str, TeamRecord] = {}
        self.protected_branches: set[str] = set()
        self.environments: dict[str, int] = {}
        self.branch_policies: dict[str, dict[str, int]] = {}
        self.secrets: dict[str, dict[str, str]] = {}
        self.private_key = public.PrivateKey.generate()
        self.uploads: list[tuple[str, bytes]] = []
        self._next_id = 100

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def _pages(self, records: list[Any]) -> AsyncIterator[list[Any]]:
        for start in range(0, len(records), self.page_size):
            yield records[start : start + self.page_size]

    async def get_repository(self) -> RepositoryRecord:
        return self.repository

    async def update_repository(self, **settings: Any) -> None:
        self.calls.append(("update_repository", settings))

    async def enable_security_features(self) -> None:
        self.calls.append(("enable_security_features",))

    def iter_labels(self) -> AsyncIterator[list[LabelRecord]]:
        return self._pages(list(self.labels.values()))

    async def create_label(self, name: str, color: str, description: str | None = None) -> None:
        self.calls.append(("create_label", name))
        self.labels[name] = LabelRecord(name=name, color=color, description=description)

    async def update_label(self, name: str, color: str | None = None, description: str | None = None) -> None:
        self.calls.append(("update_label", name))
        self.labels[name] = LabelRecord(name=name, color=color or self.labels[name].color, description=description)

    async def delete_label(self, name: str) -> None:
        self.calls.append(("delete_label", name))
        del self.labels[name]

    def iter_teams(self) -> AsyncIterator[list[TeamRecord]]:
        return self._pages(list(self.teams.values()))

    async def set_team_permission(self, org: str, team_slug: str, permission: str) -> None:
        self.calls.append(("set_team_permission", org, team_slug, permission))
        self.teams[team_slug] = TeamRecord(slug=team_slug, name=team_slug, permission=permission)

    async def remove_team(self, org: str, team_slug: str) -> None:
        self.calls.append(("remove_team", org, team_slug))
        del self.teams[team_slug]

    def iter_protected_branches(self) -> AsyncIterator[list[BranchRecord]]:
        return self._pages([BranchRecord(name=name, protected=True) for name in sorted(self.protected_branches)])

    async def protect_branch(self, branch: str, protection: dict[str, Any]) -> None:
        self.calls.append(("protect_branch", branch))
        self.protected_branches.add(branch)

    async def unprotect_branch(self, branch: str) -> None:
        self.calls.append(("unprotect_branch", branch))
        self.protected_branches.discard(branch)

    def iter_environments(self) -> AsyncIterator[list[EnvironmentRecord]]:
        return self._pages([EnvironmentRecord(id=env_id, name=name) for name, env_id in self.environments.items()])

    async def create_or_update_environment(self, environment_name: str, custom_branch_policies: bool = True) -> None:
        self.calls.append(("create_or_update_environment", environment_name))
        self.environments.setdefault(environment_name, self._id())
        self.branch_policies.setdefault(environment_name, {})
        self.secrets.setdefault(environment_name, {})

    async def delete_environment(self, environment_name: str) -> None:
        self.calls.append(("delete_environment", environment_name))
        del self.environments[environment_name]

    def iter_branch_policies(self, environment_name: str) -> AsyncIterator[list[BranchPolicyRecord]]:
        policies = self.branch_policies.get(environment_name, {})
        return self._pages([BranchPolicyRecord(id=policy_id, name=name) for name, policy_id in policies.items()])

    async def create_branch_policy(self, environment_name: str, name: str) -> None:
        self.calls.append(("create_branch_policy", environment_name, name))
        self.branch_policies[environment_name][name] = self._id()

    async def delete_branch_policy(self, environment_name: str, branch_policy_id: int) -> None:
        self.calls.append(("delete_branch_policy", environment_name, branch_policy_id))
        policies = self.branch_policies[environment_name]
        for name, policy_id in list(policies.items()):
            if policy_id == branch_policy_id:
                del policies[name]

    def iter_environment_secrets(self, environment_name: str) -> AsyncIterator[list[SecretRecord]]:
        return self._pages([SecretRecord(name=name) for name in self.secrets.get(environment_name, {})])

    async def get_environment_public_key(self, environment_name: str) -> PublicKeyRecord:
        self.calls.append(("get_environment_public_key", environment_name))
        key = self.private_key.public_key.encode(encoding.Base64Encoder).decode("utf-8")
        return PublicKeyRecord(key_id="key-1", key=key)

    async def put_environment_secret(self, environment_name: str, secret_name: str, encrypted_value: str, key_id: str) -> None:
        self.calls.append(("put_environment_secret", environment_name, secret_name))
        self.secrets.setdefault(environment_name, {})[secret_name] = encrypted_value

    async def delete_environment_secret(self, environment_name: str, secret_name: str) -> None:
        self.calls.append(("delete_environment_secret", environment_name, secret_name))
        del self.secrets[environment_name][secret_name]

    def decrypt_secret(self, environment_name: str, secret_name: str) -> str:
        sealed_box = public.SealedBox(self.private_key)
        return sealed_box.decrypt(self.secrets[environment_name][secret_name].encode("utf-8"), encoding.Base64Encoder).decode("utf-8")

    async def create_release(self, tag_name: str, prerelease: bool = False) -> ReleaseRecord:
        self.calls.append(("create_release", tag_name, prerelease))
        return ReleaseRecord(
            id=self._id(),
            tag_name=tag_name,
            upload_url="https://uploads.github.com/repos/clevercanyon/skeleton-demo/releases/1/assets{?name,label}",
        )

    async def upload_release_asset(self, release: ReleaseRecord, asset_path: Path, name: str) -> None:
        self.calls.append(("upload_release_asset", release.tag_name, name))
        self.uploads.append((name, asset_path.read_bytes()))

    def mutations(self, method: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == method]


@pytest.fixture
def fake_github() -> FakeGitHubAdapter:
    """An organization repository the current user can administer."""
    return FakeGitHubAdapter()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project directory holding a minimal `package.json`."""
    manifest = {
        "name": "@clevercanyon/skeleton-demo",
        "version": "1.0.0",
        "repository": "https://github.com/clevercanyon/skeleton-demo",
    }
    (tmp_path / "package.json").write_text(json.dumps(manifest, indent=4) + "\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def base_config(project_dir: Path) -> BaseConfig:
    return BaseConfig(
        project_dir=project_dir,
        github_credentials=GitHubCredentials(github_auth_type=GitHubAuthenticationType.PAT, github_pat_token="gh-token"),
        npm_token="npm-token",
    )


class FakeRunner:
    """Stands in for `run_command`, answering each command from a table of canned outputs.

    `responses` maps a command prefix (e.g. `("git", "status")`) to either the stdout
    to return or an exception to raise. Unmatched commands return an empty string.
    """

    def __init__(self, responses: dict[tuple[str, ...], Any] | None = None) -> None:
        self.responses = responses or {}
        self.commands: list[list[str]] = []
        self.envs: list[dict[str, str] | None] = []

    def __call__(
        self,
        cmd: str,
        args: list[str] | None = None,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        quiet: bool = False,
    ) -> str:
        command = [cmd, *(args or [])]
        self.commands.append(command)
        self.envs.append(env)
        matches = [prefix for prefix in self.responses if tuple(command[: len(prefix)]) == prefix]
        if not matches:
            return ""
        response = self.responses[max(matches, key=len)]
        if isinstance(response, Exception):
            raise response
        return response

    def ran(self, *prefix: str) -> bool:
        return any(tuple(command[: len(prefix)]) == prefix for command in self.commands)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
