"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path
from typing import Any, Coroutine, TypeVar

import typer
from dotenv import load_dotenv
from githubkit.exception import RequestFailed
from typer import Option
from typing_extensions import Annotated

from skeleton_ops_manager.configuration.env import Settings
from skeleton_ops_manager.configuration.exceptions import SkeletonOpsError
from skeleton_ops_manager.configuration.logging import configure_logging
from skeleton_ops_manager.configuration.models import BaseConfig
from skeleton_ops_manager.configuration.reconcile import reconcile_base_configuration
from skeleton_ops_manager.project.envs import decrypt_envs, encrypt_envs, install_envs, pull_envs, push_envs
from skeleton_ops_manager.project.git import GitRepository
from skeleton_ops_manager.project.manifest import ProjectManifest, increment_version
from skeleton_ops_manager.project.release import publish_project
from skeleton_ops_manager.synchronize.driver import (
    run_github_environments_workflow,
    run_github_standards_workflow,
    run_npmjs_standards_workflow,
)
from skeleton_ops_manager.synchronize.results import WorkflowResult
from skeleton_ops_manager.tooling.dotenv_vault import DotenvVaultCli
from skeleton_ops_manager.tooling.npm import NpmCli
from skeleton_ops_manager.utils.constants import DEFAULT_GITHUB_ORGANIZATION, DEFAULT_NPMJS_SCOPE, ENV_FILES
from skeleton_ops_manager.utils.helpers import is_interactive

load_dotenv()

T = TypeVar("T")

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Developer operations for projects built from the skeleton.")
envs_app = typer.Typer(help="Env file and dotenv-vault commands")
github_app = typer.Typer(help="GitHub repository commands")
npmjs_app = typer.Typer(help="npmjs package commands")
version_app = typer.Typer(help="Package version commands")


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    project_dir: Annotated[Path, Option(envvar="PROJECT_DIR", help="Path to the project directory.")] = Path("."),
    dry_run: Annotated[bool, Option(envvar="DRY_RUN", help="Log every action without performing any writes.")] = False,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = False,
    github_organization: Annotated[
        str, Option(envvar="GITHUB_ORGANIZATION", help="GitHub organization whose standards apply.")
    ] = DEFAULT_GITHUB_ORGANIZATION,
    npmjs_scope: Annotated[str, Option(envvar="NPMJS_SCOPE", help="npm scope whose standards apply.")] = DEFAULT_NPMJS_SCOPE,
    github_api_url: Annotated[str, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = "https://api.github.com",
    github_pat_token: Annotated[str | None, Option(envvar="USER_GITHUB_TOKEN", help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
    npm_token: Annotated[str | None, Option(envvar="USER_NPM_TOKEN", help="npm access token.")] = None,
) -> None:
    """Set the project and credentials for the current context."""
    configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["project_dir"] = project_dir
    ctx.obj["dry_run"] = dry_run
    ctx.obj["debug"] = debug
    ctx.obj["github_organization"] = github_organization
    ctx.obj["npmjs_scope"] = npmjs_scope
    ctx.obj["github_api_url"] = github_api_url
    ctx.obj["github_pat_token"] = github_pat_token
    ctx.obj["github_app_id"] = github_app_id
    ctx.obj["github_app_private_key_path"] = github_app_private_key_path
    ctx.obj["github_app_installation_id"] = github_app_installation_id
    ctx.obj["npm_token"] = npm_token


async def load_config(ctx: typer.Context, require_github: bool = False) -> BaseConfig:
    return await reconcile_base_configuration(
        cli_project_dir=ctx.obj["project_dir"],
        cli_dry_run=ctx.obj["dry_run"],
        cli_debug=ctx.obj["debug"],
        cli_github_organization=ctx.obj["github_organization"],
        cli_npmjs_scope=ctx.obj["npmjs_scope"],
        cli_github_api_url=ctx.obj["github_api_url"],
        cli_github_pat_token=ctx.obj["github_pat_token"],
        cli_github_app_id=ctx.obj["github_app_id"],
        cli_github_app_private_key_path=ctx.obj["github_app_private_key_path"],
        cli_github_app_installation_id=ctx.obj["github_app_installation_id"],
        cli_npm_token=ctx.obj["npm_token"],
        require_github=require_github,
    )


def run_async(coroutine: Coroutine[Any, Any, T]) -> T:
    """Run a command's coroutine, reporting any failure as a single error line and exit status 1."""
    try:
        return asyncio.run(coroutine)
    except (SkeletonOpsError, RequestFailed) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def echo_workflow_result(title: str, result: WorkflowResult | None) -> None:
    if result is None:
        return
    message = f"{title}: {result.status.value}"
    if result.reason:
        message += f" ({result.reason})"
    elif result.actions:
        message += f" ({result.action_count} actions)"
    typer.echo(message)


# --- envs ---
@envs_app.command(name="push")
def envs_push_cli(ctx: typer.Context) -> None:
    """Push all env files to the vault, then to the GitHub repository environments."""

    async def push() -> WorkflowResult | None:
        config = await load_config(ctx)
        return await push_envs(config, DotenvVaultCli(config.project_dir), GitRepository(config.project_dir))

    echo_workflow_result("GitHub environments", run_async(push()))


@envs_app.command(name="pull")
def envs_pull_cli(ctx: typer.Context) -> None:
    """Pull all env files from the vault."""

    async def pull() -> None:
        config = await load_config(ctx)
        pull_envs(config, DotenvVaultCli(config.project_dir))

    run_async(pull())


@envs_app.command(name="keys")
def envs_keys_cli(ctx: typer.Context) -> None:
    """Print the vault's decryption keys."""

    async def keys() -> str:
        config = await load_config(ctx)
        return DotenvVaultCli(config.project_dir).keys_output(quiet=True)

    typer.echo(run_async(keys()))


@envs_app.command(name="encrypt")
def envs_encrypt_cli(ctx: typer.Context) -> None:
    """Encrypt all env files into the vault."""

    async def encrypt() -> None:
        config = await load_config(ctx)
        encrypt_envs(config, DotenvVaultCli(config.project_dir))

    run_async(encrypt())


@envs_app.command(name="decrypt")
def envs_decrypt_cli(
    ctx: typer.Context,
    keys: Annotated[list[str], Option("--keys", help="Decryption key; repeat for several environments.")],
) -> None:
    """Decrypt env files from the vault using decryption keys."""

    async def decrypt() -> list[Path]:
        config = await load_config(ctx)
        return decrypt_envs(config, DotenvVaultCli(config.project_dir), keys)

    for path in run_async(decrypt()):
        typer.echo(f"Decrypted {path}")


@envs_app.command(name="install")
def envs_install_cli(
    ctx: typer.Context,
    mode: Annotated[str, Option(help="Build mode whose env files are needed.")] = "prod",
) -> None:
    """Install env files: decrypt in CI, pull from the vault otherwise."""
    settings = Settings()

    async def install() -> None:
        config = await load_config(ctx)
        dotenv_keys = {env_name: settings.dotenv_key(env_name) for env_name in ENV_FILES}
        install_envs(config, DotenvVaultCli(config.project_dir), mode, dotenv_keys, interactive=is_interactive(settings))

    run_async(install())


# --- github ---
@github_app.command(name="configure")
def github_configure_cli(ctx: typer.Context) -> None:
    """Apply the org-wide standards to the GitHub repository."""

    async def configure() -> WorkflowResult:
        config = await load_config(ctx, require_github=True)
        manifest = ProjectManifest.load(config.project_dir)
        return await run_github_standards_workflow(config, manifest, GitRepository(config.project_dir))

    echo_workflow_result("GitHub repository", run_async(configure()))


@github_app.command(name="push-envs")
def github_push_envs_cli(ctx: typer.Context) -> None:
    """Push the vault's decryption keys to the GitHub repository environments."""

    async def push() -> WorkflowResult:
        config = await load_config(ctx, require_github=True)
        manifest = ProjectManifest.load(config.project_dir)
        return await run_github_environments_workflow(
            config, manifest, GitRepository(config.project_dir), DotenvVaultCli(config.project_dir)
        )

    echo_workflow_result("GitHub environments", run_async(push()))


# --- npmjs ---
@npmjs_app.command(name="configure")
def npmjs_configure_cli(ctx: typer.Context) -> None:
    """Apply the org-wide standards to the npmjs package."""

    async def configure() -> WorkflowResult:
        config = await load_config(ctx)
        manifest = ProjectManifest.load(config.project_dir)
        return await run_npmjs_standards_workflow(config, manifest, NpmCli(config.project_dir, npm_token=config.npm_token))

    echo_workflow_result("npmjs package", run_async(configure()))


# --- version ---
@version_app.command(name="increment")
def version_increment_cli(ctx: typer.Context) -> None:
    """Increment the package version."""

    async def increment() -> str:
        config = await load_config(ctx)
        return increment_version(ProjectManifest.load(config.project_dir), dry_run=config.dry_run)

    typer.echo(run_async(increment()))


# --- publish ---
@typer_app.command(name="publish")
def publish_cli(
    ctx: typer.Context,
    mode: Annotated[str, Option(help="Build mode.")] = "prod",
) -> None:
    """Build, tag, and release the current version, publishing to npm when public."""

    async def publish() -> None:
        config = await load_config(ctx, require_github=True)
        manifest = ProjectManifest.load(config.project_dir)
        result = await publish_project(
            config, manifest, GitRepository(config.project_dir), NpmCli(config.project_dir, npm_token=config.npm_token), mode=mode
        )
        typer.echo(f"Published v{result.version}" + (" (dry run)" if config.dry_run else ""))
        echo_workflow_result("npmjs package", result.npmjs)

    run_async(publish())


typer_app.add_typer(envs_app, name="envs")
typer_app.add_typer(github_app, name="github")
typer_app.add_typer(npmjs_app, name="npmjs")
typer_app.add_typer(version_app, name="version")


if __name__ == "__main__":
    typer_app()
