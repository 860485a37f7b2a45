"""Builds, tags, and publishes a release of the project."""

from dataclasses import dataclass

import structlog

from skeleton_ops_manager.configuration.exceptions import PreconditionError
from skeleton_ops_manager.configuration.models import BaseConfig
from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.records import ReleaseRecord
from skeleton_ops_manager.project.git import GitRepository
from skeleton_ops_manager.project.manifest import ProjectManifest, increment_version, is_prerelease
from skeleton_ops_manager.synchronize.driver import create_github_adapter, run_npmjs_standards_workflow
from skeleton_ops_manager.synchronize.results import WorkflowResult
from skeleton_ops_manager.tooling.npm import NpmCli
from skeleton_ops_manager.tooling.vite import vite_build
from skeleton_ops_manager.utils.constants import DIST_ZIP_FILE_NAME, NPMJS_REGISTRY_URL, RELEASE_ASSET_NAME

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass
class PublishResult:
    """What a publish run did."""

    version: str
    release: ReleaseRecord | None = None
    npm_published: bool = False
    npmjs: WorkflowResult | None = None


def check_publish_preconditions(git: GitRepository, mode: str) -> str:
    """Verify the project can be published. Returns the current branch.

    Raises:
        PreconditionError: On a dirty working tree, a non-`main` branch in `prod`
            mode, or a missing GitHub origin.
    """
    if git.is_dirty():
        raise PreconditionError("Git repo is dirty; please commit changes first.")
    branch = git.current_branch()
    if mode == "prod" and branch != "main":
        raise PreconditionError("Must be on the `main` branch to publish in `prod` mode.")
    git.github_origin()
    return branch


async def publish_project(
    config: BaseConfig,
    manifest: ProjectManifest,
    git: GitRepository,
    npm: NpmCli,
    mode: str = "prod",
    github_adapter: GitHubClientBase | None = None,
) -> PublishResult:
    """Bump the version, then build, commit, tag, push, and release it.

    The npm package is published only when it is public, on `main`, in `prod` mode;
    the npmjs standards are then applied when the registry is npmjs. A dry run logs
    each of those steps and still runs the npmjs standards as a dry run.
    """
    branch = check_publish_preconditions(git, mode)
    owner, repo = git.github_origin()
    version = increment_version(manifest, dry_run=config.dry_run)
    result = PublishResult(version=version)
    publish_to_npm = manifest.private is not True and branch == "main" and mode == "prod"
    logger.info("Publishing project", version=version, branch=branch, mode=mode, dry_run=config.dry_run)

    if config.dry_run:
        logger.info("Would build project", mode=mode)
        logger.info("Would commit, tag, and push release", tag=f"v{version}", branch=branch)
        logger.info("Would create GitHub release", repository=f"{owner}/{repo}", tag=f"v{version}", asset=RELEASE_ASSET_NAME)
        if publish_to_npm:
            logger.info("Would publish npm package", package=manifest.name, version=version)
            if npm.is_registry(NPMJS_REGISTRY_URL):
                result.npmjs = await run_npmjs_standards_workflow(config, manifest, npm)
        return result

    vite_build(config.project_dir, mode=mode, env=config.child_process_env)
    dist_zip = config.project_dir / DIST_ZIP_FILE_NAME
    if not dist_zip.exists():
        raise PreconditionError(f"Missing `./{DIST_ZIP_FILE_NAME}` after build.")

    git.add_commit_tag_push(version, f"Release v{version}.")

    if github_adapter is None:
        github_adapter = await create_github_adapter(config, owner, repo)
    result.release = await github_adapter.create_release(f"v{version}", prerelease=is_prerelease(version))
    logger.info("Created GitHub release", tag=result.release.tag_name, url=result.release.html_url)
    await github_adapter.upload_release_asset(result.release, dist_zip, RELEASE_ASSET_NAME)
    logger.info("Uploaded release asset", tag=result.release.tag_name, asset=RELEASE_ASSET_NAME)

    if publish_to_npm:
        npm.publish()
        result.npm_published = True
        if npm.is_registry(NPMJS_REGISTRY_URL):
            result.npmjs = await run_npmjs_standards_workflow(config, manifest, npm)
    return result
