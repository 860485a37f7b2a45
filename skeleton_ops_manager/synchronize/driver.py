"""Orchestrates the org-wide standards workflows for GitHub and npmjs.

Each workflow reads the manifest once, short-circuits on a matching version marker,
reconciles its domains in order, and only then persists the new marker.
"""

import time

import structlog

from skeleton_ops_manager.configuration.exceptions import PreconditionError, RequiredConfigurationElementError
from skeleton_ops_manager.configuration.models import BaseConfig
from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.adapter import GitHubKitAdapter
from skeleton_ops_manager.github.records import RepositoryRecord
from skeleton_ops_manager.project.git import GitRepository
from skeleton_ops_manager.project.manifest import ProjectManifest
from skeleton_ops_manager.schemas.declarations import parse_label_declarations, parse_team_declarations
from skeleton_ops_manager.synchronize.branch_protections import desired_branch_protections, sync_github_branch_protections
from skeleton_ops_manager.synchronize.environments import desired_environments, sync_github_environments
from skeleton_ops_manager.synchronize.labels import desired_labels, sync_github_labels
from skeleton_ops_manager.synchronize.models import SyncDecision
from skeleton_ops_manager.synchronize.npm_teams import desired_npm_teams, sync_npm_teams
from skeleton_ops_manager.synchronize.reconciler import should_skip
from skeleton_ops_manager.synchronize.results import WorkflowResult, WorkflowStatus
from skeleton_ops_manager.synchronize.secrets import desired_environment_secrets, sync_github_environment_secrets
from skeleton_ops_manager.synchronize.teams import desired_teams, sync_github_teams
from skeleton_ops_manager.tooling.dotenv_vault import DotenvVaultCli
from skeleton_ops_manager.tooling.npm import NpmCli
from skeleton_ops_manager.utils.constants import (
    ENV_FILES,
    GITHUB_CONFIG_VERSION,
    GITHUB_CONFIG_VERSION_PATH,
    GITHUB_ENVS_VERSION,
    GITHUB_ENVS_VERSION_PATH,
    GITHUB_LABELS_PATH,
    GITHUB_TEAMS_PATH,
    NPMJS_CONFIG_VERSION,
    NPMJS_CONFIG_VERSIONS_PATH,
    NPMJS_TEAMS_PATH,
    REPOSITORY_SETTINGS,
)
from skeleton_ops_manager.utils.github import default_repository_homepage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def create_github_adapter(config: BaseConfig, owner: str, repo: str) -> GitHubKitAdapter:
    """Create an adapter for `owner/repo` from the configured credentials."""
    if config.github_credentials is None:
        raise RequiredConfigurationElementError(name="GitHub token", cli_name="github_pat_token", env_name="USER_GITHUB_TOKEN")
    return await GitHubKitAdapter.create(repo=f"{owner}/{repo}", credentials=config.github_credentials)


def check_github_standards_applicability(repository: RepositoryRecord, config: BaseConfig) -> WorkflowResult | None:
    """Return a skip result when the org-wide standards do not apply to this repository.

    A user without admin rights is an expected skip, not an error.
    """
    if not repository.is_organization_owned:
        logger.debug("Repository is not part of an organization", repository=repository.full_name)
        return WorkflowResult(WorkflowStatus.NOT_APPLICABLE, reason="Repository is not part of an organization.")
    if repository.organization_login != config.github_organization:
        logger.debug("Repository is not in the standards organization", repository=repository.full_name, organization=config.github_organization)
        return WorkflowResult(WorkflowStatus.NOT_APPLICABLE, reason=f"Repository is not in the `{config.github_organization}` organization.")
    if not repository.user_can_admin:
        logger.debug("Current user cannot administer repository", repository=repository.full_name)
        return WorkflowResult(WorkflowStatus.PERMISSION_DENIED, reason="Current user's permissions do not allow repository configuration.")
    return None


def _finish(config: BaseConfig, manifest: ProjectManifest, marker_path: str, version: str) -> WorkflowStatus:
    if config.dry_run:
        return WorkflowStatus.DRY_RUN
    manifest.set(marker_path, version)
    manifest.save()
    return WorkflowStatus.APPLIED


async def run_github_standards_workflow(
    config: BaseConfig,
    manifest: ProjectManifest,
    git: GitRepository,
    github_adapter: GitHubClientBase | None = None,
) -> WorkflowResult:
    """Configure the repository's settings, labels, teams, and branch protections."""
    owner, repo = git.github_origin()
    if github_adapter is None:
        github_adapter = await create_github_adapter(config, owner, repo)
    repository = await github_adapter.get_repository()

    skip = check_github_standards_applicability(repository, config)
    if skip is not None:
        return skip

    if should_skip(manifest.get(GITHUB_CONFIG_VERSION_PATH), GITHUB_CONFIG_VERSION):
        logger.info("GitHub repo configuration is up-to-date", version=GITHUB_CONFIG_VERSION)
        return WorkflowResult(WorkflowStatus.UP_TO_DATE, version=GITHUB_CONFIG_VERSION)

    if repository.default_branch != "main":
        raise PreconditionError("Default branch at GitHub must be `main`.")

    labels = desired_labels(parse_label_declarations(manifest.get(GITHUB_LABELS_PATH), GITHUB_LABELS_PATH))
    teams = desired_teams(parse_team_declarations(manifest.get(GITHUB_TEAMS_PATH), GITHUB_TEAMS_PATH))

    start_time = time.time()
    logger.info("Configuring GitHub repo using org-wide standards", owner=owner, repo=repo, dry_run=config.dry_run)
    if not config.dry_run:
        await github_adapter.update_repository(
            **REPOSITORY_SETTINGS,
            homepage=manifest.homepage or default_repository_homepage(owner, repo),
            description=manifest.description or f"Another great project by @{repository.owner.login}.",
            is_template=manifest.is_template_repo(),
        )
        await github_adapter.enable_security_features()

    actions = {
        "labels": await sync_github_labels(github_adapter, labels, dry_run=config.dry_run),
        "teams": await sync_github_teams(github_adapter, owner, teams, dry_run=config.dry_run),
        "branch_protections": await sync_github_branch_protections(github_adapter, desired_branch_protections(), dry_run=config.dry_run),
    }
    status = _finish(config, manifest, GITHUB_CONFIG_VERSION_PATH, GITHUB_CONFIG_VERSION)
    logger.info("Configured GitHub repo", status=status.value, duration=round(time.time() - start_time, 2))
    return WorkflowResult(status, version=GITHUB_CONFIG_VERSION, actions=actions)


async def run_github_environments_workflow(
    config: BaseConfig,
    manifest: ProjectManifest,
    git: GitRepository,
    vault: DotenvVaultCli,
    github_adapter: GitHubClientBase | None = None,
) -> WorkflowResult:
    """Configure repository environments and distribute the vault decryption keys as their secrets."""
    owner, repo = git.github_origin()
    if github_adapter is None:
        github_adapter = await create_github_adapter(config, owner, repo)
    repository = await github_adapter.get_repository()

    skip = check_github_standards_applicability(repository, config)
    if skip is not None:
        return skip

    if should_skip(manifest.get(GITHUB_ENVS_VERSION_PATH), GITHUB_ENVS_VERSION):
        logger.info("GitHub repo environments are up-to-date", version=GITHUB_ENVS_VERSION)
        return WorkflowResult(WorkflowStatus.UP_TO_DATE, version=GITHUB_ENVS_VERSION)

    logger.info("Configuring GitHub repo environments using org-wide standards", owner=owner, repo=repo, dry_run=config.dry_run)
    dotenv_keys = vault.extract_keys(list(ENV_FILES))
    environments = desired_environments()
    actions = await sync_github_environments(github_adapter, environments, dry_run=config.dry_run)

    # On a dry run, environments that would be created do not exist yet.
    not_yet_created = {action.name for action in actions["environments"] if action.decision == SyncDecision.CREATE and not action.applied}
    for env_name in environments:
        if env_name in not_yet_created:
            logger.info("Skipping secrets of an environment that does not exist yet", environment=env_name)
            continue
        actions[f"secrets:{env_name}"] = await sync_github_environment_secrets(
            github_adapter,
            env_name,
            desired_environment_secrets(env_name, dotenv_keys),
            dry_run=config.dry_run,
        )

    status = _finish(config, manifest, GITHUB_ENVS_VERSION_PATH, GITHUB_ENVS_VERSION)
    return WorkflowResult(status, version=GITHUB_ENVS_VERSION, actions=actions)


async def run_npmjs_standards_workflow(config: BaseConfig, manifest: ProjectManifest, npm: NpmCli) -> WorkflowResult:
    """Configure which organization teams can access the package on npmjs."""
    scope, _ = manifest.npm_origin()
    if scope != config.npmjs_scope:
        return WorkflowResult(WorkflowStatus.NOT_APPLICABLE, reason=f"Package not in the `{config.npmjs_scope}` organization.")
    if not npm.user_can_admin_org(scope):
        return WorkflowResult(WorkflowStatus.PERMISSION_DENIED, reason="Current user's permissions do not allow package configuration.")

    versions = f"{GITHUB_CONFIG_VERSION},{NPMJS_CONFIG_VERSION}"
    if should_skip(manifest.get(NPMJS_CONFIG_VERSIONS_PATH), versions):
        logger.info("npmjs package configuration is up-to-date", versions=versions)
        return WorkflowResult(WorkflowStatus.UP_TO_DATE, version=versions)

    declared = manifest.get(NPMJS_TEAMS_PATH)
    if declared is None:
        declared = manifest.get(GITHUB_TEAMS_PATH)
    teams = desired_npm_teams(parse_team_declarations(declared, NPMJS_TEAMS_PATH))

    logger.info("Configuring npmjs package using org-wide standards", scope=scope, dry_run=config.dry_run)
    actions = {"teams": await sync_npm_teams(npm, scope, teams, dry_run=config.dry_run)}
    status = _finish(config, manifest, NPMJS_CONFIG_VERSIONS_PATH, versions)
    return WorkflowResult(status, version=versions, actions=actions)
