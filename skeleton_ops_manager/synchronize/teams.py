"""Contains synchronization logic for GitHub repository team access."""

from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.records import TeamRecord
from skeleton_ops_manager.synchronize.models import ReconciliationAction
from skeleton_ops_manager.synchronize.reconciler import merge_desired, reconcile
from skeleton_ops_manager.utils.constants import BASELINE_GITHUB_TEAMS


def desired_teams(overrides: dict[str, str] | None = None) -> dict[str, str]:
    """Baseline team permissions merged over the manifest's team declarations."""
    return merge_desired(BASELINE_GITHUB_TEAMS, overrides)


async def sync_github_teams(
    github_adapter: GitHubClientBase,
    org: str,
    desired: dict[str, str],
    dry_run: bool = False,
) -> list[ReconciliationAction]:
    """Converge the teams with access to the repository to `desired` (slug to permission)."""

    async def grant(team_slug: str, permission: str) -> None:
        await github_adapter.set_team_permission(org=org, team_slug=team_slug, permission=permission)

    async def remove(team_slug: str, _: TeamRecord) -> None:
        await github_adapter.remove_team(org=org, team_slug=team_slug)

    return await reconcile(
        desired,
        github_adapter.iter_teams(),
        key=lambda team: team.slug,
        create=grant,
        update=grant,
        delete=remove,
        dry_run=dry_run,
        resource="repository team",
    )
