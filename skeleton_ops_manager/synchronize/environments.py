"""Contains synchronization logic for GitHub deployment environments and their branch policies."""

import structlog

from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.records import BranchPolicyRecord, EnvironmentRecord
from skeleton_ops_manager.synchronize.models import ReconciliationAction
from skeleton_ops_manager.synchronize.reconciler import reconcile
from skeleton_ops_manager.utils.constants import ENVIRONMENT_BRANCH_POLICIES, REPOSITORY_ENVIRONMENTS

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def desired_environments() -> dict[str, tuple[str, ...]]:
    """Environment name to the branches allowed to deploy to it."""
    return {env_name: ENVIRONMENT_BRANCH_POLICIES.get(env_name, ()) for env_name in REPOSITORY_ENVIRONMENTS}


async def sync_github_branch_policies(
    github_adapter: GitHubClientBase,
    environment_name: str,
    branches: tuple[str, ...],
    dry_run: bool = False,
) -> list[ReconciliationAction]:
    """Converge an environment's deployment branch policies to `branches`.

    Existing policies carry no attributes worth rewriting, so updates are no-ops.
    """

    async def create(name: str, _: None) -> None:
        await github_adapter.create_branch_policy(environment_name, name)

    async def keep(name: str, _: None) -> None:
        return None

    async def delete(name: str, policy: BranchPolicyRecord) -> None:
        await github_adapter.delete_branch_policy(environment_name, policy.id)

    return await reconcile(
        {branch: None for branch in branches},
        github_adapter.iter_branch_policies(environment_name),
        key=lambda policy: policy.name,
        create=create,
        update=keep,
        delete=delete,
        dry_run=dry_run,
        resource=f"`{environment_name}` deployment branch policy",
    )


async def sync_github_environments(
    github_adapter: GitHubClientBase,
    desired: dict[str, tuple[str, ...]],
    dry_run: bool = False,
) -> dict[str, list[ReconciliationAction]]:
    """Converge repository environments to `desired`, then each environment's branch policies.

    Branch policies are only reconciled on a real run; on a dry run a new environment
    does not exist yet to list its policies.
    """
    actions: dict[str, list[ReconciliationAction]] = {}

    async def create_or_update(env_name: str, branches: tuple[str, ...]) -> None:
        await github_adapter.create_or_update_environment(env_name, custom_branch_policies=True)
        actions[f"branch_policies:{env_name}"] = await sync_github_branch_policies(github_adapter, env_name, branches, dry_run=dry_run)

    async def delete(env_name: str, _: EnvironmentRecord) -> None:
        await github_adapter.delete_environment(env_name)

    actions["environments"] = await reconcile(
        desired,
        github_adapter.iter_environments(),
        key=lambda environment: environment.name,
        create=create_or_update,
        update=create_or_update,
        delete=delete,
        dry_run=dry_run,
        resource="repository environment",
    )
    return actions
