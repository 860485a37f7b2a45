"""GitHub client adapter for the githubkit library."""

from functools import wraps
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Self, Type, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import RequestFailed

from skeleton_ops_manager.configuration.exceptions import RemoteResponseShapeError, RemoteValidationError
from skeleton_ops_manager.configuration.models import GitHubCredentials
from skeleton_ops_manager.github.records import (
    BranchPolicyRecord,
    BranchRecord,
    EnvironmentRecord,
    LabelRecord,
    PublicKeyRecord,
    RecordT,
    ReleaseRecord,
    RepositoryRecord,
    SecretRecord,
    TeamRecord,
    parse_record,
    parse_records,
)
from skeleton_ops_manager.utils.github import split_repository_in_configuration

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_github_422(func: F) -> F:
    """Decorator to handle GitHub 422 Unprocessable Entity errors, logging and raising with details."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RequestFailed as exc:
            if exc.response.status_code == 422:
                try:
                    error_data = exc.response.json()
                except ValueError:
                    error_data = {}
                message = error_data.get("message", "Unprocessable Entity")
                errors = error_data.get("errors", [])
                logger.error(
                    "GitHub 422 Unprocessable Entity",
                    function=func.__name__,
                    message=message,
                    errors=errors,
                    url=getattr(exc.response, "url", None),
                    status_code=422,
                )
                raise RemoteValidationError(func.__name__, message, errors, str(getattr(exc.response, "url", None))) from exc
            raise

    return wrapper  # type: ignore


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str, per_page: int = 100) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name
        self.per_page = per_page

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    @classmethod
    async def create(cls, repo: str, credentials: GitHubCredentials) -> Self:
        """Create a new GitHub client adapter.

        Args:
            repo: Repository in 'owner/repo' format
            credentials: Authentication type, secrets, and API URL to use

        Returns:
            Configured GitHubKitAdapter instance

        Raises:
            ValueError: If the repository is not in `owner/repo` form
        """
        owner, repo_name = await split_repository_in_configuration(repo=repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=credentials.github_api_url,
            owner=owner,
            repo_name=repo_name,
        )
        client = get_github_client(credentials)
        return cls(client, owner, repo_name)

    async def _paginate(
        self,
        fetch_page: Callable[[int], Awaitable[Response[Any]]],
        model: Type[RecordT],
        source: str,
        items_key: str | None = None,
    ) -> AsyncIterator[list[RecordT]]:
        """Yield validated pages until GitHub returns an empty or short page.

        `items_key` names the list inside wrapped listings (e.g. `{"total_count": 1, "environments": [...]}`).
        """
        page: int = 1
        while True:
            logger.debug("Fetching page", source=source, page=page, per_page=self.per_page)
            response = await fetch_page(page)
            data = response.json()
            if items_key is not None:
                if not isinstance(data, dict):
                    raise RemoteResponseShapeError(source, f"expected an object with '{items_key}'")
                data = data.get(items_key, [])
            records = parse_records(model, data, source)
            if not records:
                break
            yield records
            if len(records) < self.per_page:
                break
            page += 1

    # Repository settings
    async def get_repository(self) -> RepositoryRecord:
        """Get the repository for the current client."""
        response = await self.client.rest.repos.async_get(owner=self.owner, repo=self.repo_name)
        return parse_record(RepositoryRecord, response.json(), "GET /repos/{owner}/{repo}")

    @handle_github_422
    async def update_repository(self, **settings: Any) -> None:
        """Update repository settings."""
        await self.client.rest.repos.async_update(owner=self.owner, repo=self.repo_name, data=self._omit_null_parameters(**settings))

    async def enable_security_features(self) -> None:
        """Enable vulnerability alerts and automated security fixes."""
        await self.client.rest.repos.async_enable_vulnerability_alerts(owner=self.owner, repo=self.repo_name)
        await self.client.rest.repos.async_enable_automated_security_fixes(owner=self.owner, repo=self.repo_name)

    # Label CRUD
    async def iter_labels(self) -> AsyncIterator[list[LabelRecord]]:
        """Iterate over pages of repository labels."""
        async for page in self._paginate(
            lambda page: self.client.rest.issues.async_list_labels_for_repo(owner=self.owner, repo=self.repo_name, per_page=self.per_page, page=page),
            LabelRecord,
            "GET /repos/{owner}/{repo}/labels",
        ):
            yield page

    @handle_github_422
    async def create_label(self, name: str, color: str, description: str | None = None) -> None:
        """Create a label for a repository."""
        params = self._omit_null_parameters(name=name, color=color, description=description)
        await self.client.rest.issues.async_create_label(owner=self.owner, repo=self.repo_name, **params)

    @handle_github_422
    async def update_label(self, name: str, color: str | None = None, description: str | None = None) -> None:
        """Update a label for a repository."""
        params = self._omit_null_parameters(color=color, description=description)
        await self.client.rest.issues.async_update_label(owner=self.owner, repo=self.repo_name, name=name, **params)

    async def delete_label(self, name: str) -> None:
        """Delete a label for a repository."""
        await self.client.rest.issues.async_delete_label(owner=self.owner, repo=self.repo_name, name=name)

    # Team access
    async def iter_teams(self) -> AsyncIterator[list[TeamRecord]]:
        """Iterate over pages of teams with access to the repository."""
        async for page in self._paginate(
            lambda page: self.client.rest.repos.async_list_teams(owner=self.owner, repo=self.repo_name, per_page=self.per_page, page=page),
            TeamRecord,
            "GET /repos/{owner}/{repo}/teams",
        ):
            yield page

    @handle_github_422
    async def set_team_permission(self, org: str, team_slug: str, permission: str) -> None:
        """Add a team to the repository, or change its permission."""
        await self.client.rest.teams.async_add_or_update_repo_permissions_in_org(
            org=org,
            team_slug=team_slug,
            owner=self.owner,
            repo=self.repo_name,
            permission=permission,
        )

    async def remove_team(self, org: str, team_slug: str) -> None:
        """Remove a team's access to the repository."""
        await self.client.rest.teams.async_remove_repo_in_org(org=org, team_slug=team_slug, owner=self.owner, repo=self.repo_name)

    # Branch protection
    async def iter_protected_branches(self) -> AsyncIterator[list[BranchRecord]]:
        """Iterate over pages of protected branches."""
        async for page in self._paginate(
            lambda page: self.client.rest.repos.async_list_branches(
                owner=self.owner, repo=self.repo_name, protected=True, per_page=self.per_page, page=page
            ),
            BranchRecord,
            "GET /repos/{owner}/{repo}/branches",
        ):
            yield page

    @handle_github_422
    async def protect_branch(self, branch: str, protection: dict[str, Any]) -> None:
        """Create or replace the protection of a branch."""
        await self.client.rest.repos.async_update_branch_protection(owner=self.owner, repo=self.repo_name, branch=branch, data=protection)

    async def unprotect_branch(self, branch: str) -> None:
        """Remove the protection of a branch."""
        await self.client.rest.repos.async_delete_branch_protection(owner=self.owner, repo=self.repo_name, branch=branch)

    # Environments
    async def iter_environments(self) -> AsyncIterator[list[EnvironmentRecord]]:
        """Iterate over pages of deployment environments."""
        async for page in self._paginate(
            lambda page: self.client.rest.repos.async_get_all_environments(owner=self.owner, repo=self.repo_name, per_page=self.per_page, page=page),
            EnvironmentRecord,
            "GET /repos/{owner}/{repo}/environments",
            items_key="environments",
        ):
            yield page

    @handle_github_422
    async def create_or_update_environment(self, environment_name: str, custom_branch_policies: bool = True) -> None:
        """Create or update an environment, restricting deployments to its branch policies."""
        await self.client.rest.repos.async_create_or_update_environment(
            owner=self.owner,
            repo=self.repo_name,
            environment_name=environment_name,
            data={
                "deployment_branch_policy": {
                    "protected_branches": not custom_branch_policies,
                    "custom_branch_policies": custom_branch_policies,
                }
            },
        )

    async def delete_environment(self, environment_name: str) -> None:
        """Delete an environment."""
        await self.client.rest.repos.async_delete_an_environment(owner=self.owner, repo=self.repo_name, environment_name=environment_name)

    async def iter_branch_policies(self, environment_name: str) -> AsyncIterator[list[BranchPolicyRecord]]:
        """Iterate over pages of deployment branch policies of an environment."""
        async for page in self._paginate(
            lambda page: self.client.rest.repos.async_list_deployment_branch_policies(
                owner=self.owner, repo=self.repo_name, environment_name=environment_name, per_page=self.per_page, page=page
            ),
            BranchPolicyRecord,
            "GET /repos/{owner}/{repo}/environments/{environment_name}/deployment-branch-policies",
            items_key="branch_policies",
        ):
            yield page

    @handle_github_422
    async def create_branch_policy(self, environment_name: str, name: str) -> None:
        """Create a deployment branch policy."""
        await self.client.rest.repos.async_create_deployment_branch_policy(
            owner=self.owner, repo=self.repo_name, environment_name=environment_name, name=name
        )

    async def delete_branch_policy(self, environment_name: str, branch_policy_id: int) -> None:
        """Delete a deployment branch policy."""
        await self.client.rest.repos.async_delete_deployment_branch_policy(
            owner=self.owner, repo=self.repo_name, environment_name=environment_name, branch_policy_id=branch_policy_id
        )

    # Environment secrets
    async def iter_environment_secrets(self, environment_name: str) -> AsyncIterator[list[SecretRecord]]:
        """Iterate over pages of secrets of an environment."""
        async for page in self._paginate(
            lambda page: self.client.rest.actions.async_list_environment_secrets(
                owner=self.owner, repo=self.repo_name, environment_name=environment_name, per_page=self.per_page, page=page
            ),
            SecretRecord,
            "GET /repos/{owner}/{repo}/environments/{environment_name}/secrets",
            items_key="secrets",
        ):
            yield page

    async def get_environment_public_key(self, environment_name: str) -> PublicKeyRecord:
        """Get the public key used to seal secrets for an environment."""
        response = await self.client.rest.actions.async_get_environment_public_key(
            owner=self.owner, repo=self.repo_name, environment_name=environment_name
        )
        return parse_record(PublicKeyRecord, response.json(), "GET /repos/{owner}/{repo}/environments/{environment_name}/secrets/public-key")

    @handle_github_422
    async def put_environment_secret(self, environment_name: str, secret_name: str, encrypted_value: str, key_id: str) -> None:
        """Create or update an environment secret."""
        await self.client.rest.actions.async_create_or_update_environment_secret(
            owner=self.owner,
            repo=self.repo_name,
            environment_name=environment_name,
            secret_name=secret_name,
            encrypted_value=encrypted_value,
            key_id=key_id,
        )

    async def delete_environment_secret(self, environment_name: str, secret_name: str) -> None:
        """Delete an environment secret."""
        await self.client.rest.actions.async_delete_environment_secret(
            owner=self.owner, repo=self.repo_name, environment_name=environment_name, secret_name=secret_name
        )

    # Releases
    @handle_github_422
    async def create_release(self, tag_name: str, prerelease: bool = False) -> ReleaseRecord:
        """Create a release named after its tag, with generated release notes."""
        response = await self.client.rest.repos.async_create_release(
            owner=self.owner,
            repo=self.repo_name,
            tag_name=tag_name,
            name=tag_name,
            draft=False,
            prerelease=prerelease,
            generate_release_notes=True,
        )
        return parse_record(ReleaseRecord, response.json(), "POST /repos/{owner}/{repo}/releases")

    @handle_github_422
    async def upload_release_asset(self, release: ReleaseRecord, asset_path: Path, name: str) -> None:
        """Upload a file as a release asset.

        The release's `upload_url` is a URI template (`.../assets{?name,label}`); the
        template part is dropped and the name passed as a query parameter.
        """
        upload_url = release.upload_url.split("{", 1)[0]
        content = asset_path.read_bytes()
        await self.client.arequest(
            "POST",
            upload_url,
            params={"name": name},
            content=content,
            headers={"Content-Type": "application/zip", "Content-Length": str(len(content))},
        )
