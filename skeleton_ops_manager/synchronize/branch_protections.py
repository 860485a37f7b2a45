"""Contains synchronization logic for GitHub branch protections."""

from typing import Any

from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.records import BranchRecord
from skeleton_ops_manager.synchronize.models import ReconciliationAction
from skeleton_ops_manager.synchronize.reconciler import reconcile
from skeleton_ops_manager.utils.constants import MAIN_BRANCH_PROTECTION, PROTECTED_BRANCHES


def desired_branch_protections() -> dict[str, dict[str, Any]]:
    return {branch: MAIN_BRANCH_PROTECTION for branch in PROTECTED_BRANCHES}


async def sync_github_branch_protections(
    github_adapter: GitHubClientBase,
    desired: dict[str, dict[str, Any]],
    dry_run: bool = False,
) -> list[ReconciliationAction]:
    """Protect every desired branch and unprotect the rest; `main` is never unprotected."""

    async def protect(branch: str, protection: dict[str, Any]) -> None:
        await github_adapter.protect_branch(branch, protection)

    async def unprotect(branch: str, _: BranchRecord) -> None:
        await github_adapter.unprotect_branch(branch)

    return await reconcile(
        desired,
        github_adapter.iter_protected_branches(),
        key=lambda branch: branch.name,
        create=protect,
        update=protect,
        delete=unprotect,
        protect=PROTECTED_BRANCHES,
        dry_run=dry_run,
        resource="branch protection",
    )
