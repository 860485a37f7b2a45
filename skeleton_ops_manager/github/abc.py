"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, AsyncIterator

from skeleton_ops_manager.github.records import (
    BranchPolicyRecord,
    BranchRecord,
    EnvironmentRecord,
    LabelRecord,
    PublicKeyRecord,
    ReleaseRecord,
    RepositoryRecord,
    SecretRecord,
    TeamRecord,
)


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients.

    Listing methods are async generators yielding one page of records at a time.
    """

    # Repository settings
    @abstractmethod
    async def get_repository(self) -> RepositoryRecord:
        """Get the repository."""
        pass

    @abstractmethod
    async def update_repository(self, **settings: Any) -> None:
        """Update repository settings."""
        pass

    @abstractmethod
    async def enable_security_features(self) -> None:
        """Enable vulnerability alerts and automated security fixes."""
        pass

    # Label CRUD
    @abstractmethod
    def iter_labels(self) -> AsyncIterator[list[LabelRecord]]:
        """Iterate over pages of repository labels."""
        pass

    @abstractmethod
    async def create_label(self, name: str, color: str, description: str | None = None) -> None:
        """Create a label for a repository."""
        pass

    @abstractmethod
    async def update_label(self, name: str, color: str | None = None, description: str | None = None) -> None:
        """Update a label for a repository."""
        pass

    @abstractmethod
    async def delete_label(self, name: str) -> None:
        """Delete a label for a repository."""
        pass

    # Team access
    @abstractmethod
    def iter_teams(self) -> AsyncIterator[list[TeamRecord]]:
        """Iterate over pages of teams with access to the repository."""
        pass

    @abstractmethod
    async def set_team_permission(self, org: str, team_slug: str, permission: str) -> None:
        """Add a team to the repository, or change its permission."""
        pass

    @abstractmethod
    async def remove_team(self, org: str, team_slug: str) -> None:
        """Remove a team's access to the repository."""
        pass

    # Branch protection
    @abstractmethod
    def iter_protected_branches(self) -> AsyncIterator[list[BranchRecord]]:
        """Iterate over pages of protected branches."""
        pass

    @abstractmethod
    async def protect_branch(self, branch: str, protection: dict[str, Any]) -> None:
        """Create or replace the protection of a branch."""
        pass

    @abstractmethod
    async def unprotect_branch(self, branch: str) -> None:
        """Remove the protection of a branch."""
        pass

    # Environments
    @abstractmethod
    def iter_environments(self) -> AsyncIterator[list[EnvironmentRecord]]:
        """Iterate over pages of deployment environments."""
        pass

    @abstractmethod
    async def create_or_update_environment(self, environment_name: str, custom_branch_policies: bool = True) -> None:
        """Create or update an environment."""
        pass

    @abstractmethod
    async def delete_environment(self, environment_name: str) -> None:
        """Delete an environment."""
        pass

    @abstractmethod
    def iter_branch_policies(self, environment_name: str) -> AsyncIterator[list[BranchPolicyRecord]]:
        """Iterate over pages of deployment branch policies of an environment."""
        pass

    @abstractmethod
    async def create_branch_policy(self, environment_name: str, name: str) -> None:
        """Create a deployment branch policy."""
        pass

    @abstractmethod
    async def delete_branch_policy(self, environment_name: str, branch_policy_id: int) -> None:
        """Delete a deployment branch policy."""
        pass

    # Environment secrets
    @abstractmethod
    def iter_environment_secrets(self, environment_name: str) -> AsyncIterator[list[SecretRecord]]:
        """Iterate over pages of secrets of an environment."""
        pass

    @abstractmethod
    async def get_environment_public_key(self, environment_name: str) -> PublicKeyRecord:
        """Get the public key used to seal secrets for an environment."""
        pass

    @abstractmethod
    async def put_environment_secret(self, environment_name: str, secret_name: str, encrypted_value: str, key_id: str) -> None:
        """Create or update an environment secret."""
        pass

    @abstractmethod
    async def delete_environment_secret(self, environment_name: str, secret_name: str) -> None:
        """Delete an environment secret."""
        pass

    # Releases
    @abstractmethod
    async def create_release(self, tag_name: str, prerelease: bool = False) -> ReleaseRecord:
        """Create a release, generating its notes."""
        pass

    @abstractmethod
    async def upload_release_asset(self, release: ReleaseRecord, asset_path: Path, name: str) -> None:
        """Upload a file as a release asset."""
        pass
