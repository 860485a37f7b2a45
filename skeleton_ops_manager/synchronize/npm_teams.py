"""Contains synchronization logic for npm organization team access to a package."""

from typing import AsyncIterator

import structlog

from skeleton_ops_manager.schemas.declarations import normalize_npm_permission
from skeleton_ops_manager.synchronize.models import ReconciliationAction
from skeleton_ops_manager.synchronize.reconciler import merge_desired, reconcile
from skeleton_ops_manager.tooling.npm import NpmCli
from skeleton_ops_manager.utils.constants import BASELINE_NPMJS_TEAMS

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def desired_npm_teams(overrides: dict[str, str] | None = None) -> dict[str, str]:
    """Baseline teams merged over the declared ones, with permissions normalized for npm."""
    merged = merge_desired(BASELINE_NPMJS_TEAMS, overrides)
    return {team: normalize_npm_permission(permission) for team, permission in merged.items()}


async def _org_team_pages(npm: NpmCli, org: str) -> AsyncIterator[list[str]]:
    # `npm team ls` is not paginated; it is the single page.
    yield list(npm.org_teams(org))


async def sync_npm_teams(
    npm: NpmCli,
    org: str,
    desired: dict[str, str],
    dry_run: bool = False,
) -> list[ReconciliationAction]:
    """Converge the org teams with access to the package to `desired`.

    Every org team that is not desired gets its access revoked. A team that never had
    access is logged and skipped; any other revoke failure aborts the pass.
    """

    async def grant(team: str, permission: str) -> None:
        npm.grant_access(permission, org, team)

    async def revoke(team: str, _: str) -> None:
        if not npm.revoke_access(org, team):
            logger.warning("npm team has no access to revoke", org=org, team=team)

    return await reconcile(
        desired,
        _org_team_pages(npm, org),
        key=lambda team: team,
        create=grant,
        update=grant,
        delete=revoke,
        dry_run=dry_run,
        resource="npmjs package team",
    )
