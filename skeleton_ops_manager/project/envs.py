"""Manages the project's env files and their dotenv-vault counterparts."""

import io
from pathlib import Path

import structlog
from dotenv import dotenv_values

from skeleton_ops_manager.configuration.env import Settings
from skeleton_ops_manager.configuration.exceptions import PreconditionError, RequiredConfigurationElementError
from skeleton_ops_manager.configuration.models import BaseConfig
from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.project.git import GitRepository
from skeleton_ops_manager.project.manifest import ProjectManifest
from skeleton_ops_manager.synchronize.driver import run_github_environments_workflow
from skeleton_ops_manager.synchronize.results import WorkflowResult
from skeleton_ops_manager.tooling.dotenv_vault import DotenvVaultCli, environment_from_key
from skeleton_ops_manager.utils.constants import ENV_FILES, REPOSITORY_ENVIRONMENTS
from skeleton_ops_manager.utils.helpers import format_env_file, is_interactive

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def env_file_path(project_dir: Path, env_name: str) -> Path:
    return project_dir / ENV_FILES[env_name]


def ensure_env_files(project_dir: Path, dry_run: bool = False) -> list[Path]:
    """Create any missing env file with just its `# <env>` header. Returns the files created."""
    created: list[Path] = []
    for env_name in ENV_FILES:
        path = env_file_path(project_dir, env_name)
        if path.exists():
            continue
        logger.info("Creating env file", environment=env_name, path=str(path), dry_run=dry_run)
        if not dry_run:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(format_env_file(env_name, {}), encoding="utf-8")
        created.append(path)
    return created


async def push_envs(
    config: BaseConfig,
    vault: DotenvVaultCli,
    git: GitRepository,
    github_adapter: GitHubClientBase | None = None,
) -> WorkflowResult | None:
    """Push every env file to the vault, rebuild it, then push the keys to GitHub environments.

    The GitHub step only runs for a git repo with a GitHub origin; its result is returned.
    """
    ensure_env_files(config.project_dir, dry_run=config.dry_run)
    for env_name in ENV_FILES:
        logger.info("Pushing env file to vault", environment=env_name, dry_run=config.dry_run)
        if not config.dry_run:
            vault.push(env_name, Path(ENV_FILES[env_name]))
    logger.info("Building vault", dry_run=config.dry_run)
    if not config.dry_run:
        vault.build()

    if not (git.is_repo() and git.has_github_origin()):
        logger.debug("Not a git repo with a GitHub origin; skipping repository environments")
        return None
    manifest = ProjectManifest.load(config.project_dir)
    return await run_github_environments_workflow(config, manifest, git, vault, github_adapter=github_adapter)


def pull_envs(config: BaseConfig, vault: DotenvVaultCli) -> None:
    """Pull every env file from the vault and drop the `.previous` backups it leaves behind."""
    for env_name in ENV_FILES:
        logger.info("Pulling env file from vault", environment=env_name, dry_run=config.dry_run)
        if config.dry_run:
            continue
        vault.pull(env_name, Path(ENV_FILES[env_name]))
        previous = env_file_path(config.project_dir, env_name).with_name(Path(ENV_FILES[env_name]).name + ".previous")
        previous.unlink(missing_ok=True)


def encrypt_envs(config: BaseConfig, vault: DotenvVaultCli) -> None:
    logger.info("Building vault", dry_run=config.dry_run)
    if not config.dry_run:
        vault.build()


def decrypt_envs(config: BaseConfig, vault: DotenvVaultCli, keys: list[str]) -> list[Path]:
    """Decrypt each key's environment from the vault into its env file. Returns the files written.

    Raises:
        PreconditionError: If a key does not name a known environment.
    """
    written: list[Path] = []
    for key in keys:
        env_name = environment_from_key(key)
        if env_name not in ENV_FILES:
            raise PreconditionError(f"Missing or invalid environment name in decryption key: `{env_name}`.")
        values = dotenv_values(stream=io.StringIO(vault.decrypt(key)))
        path = env_file_path(config.project_dir, env_name)
        logger.info("Decrypting env file", environment=env_name, path=str(path), variables=len(values), dry_run=config.dry_run)
        if not config.dry_run:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(format_env_file(env_name, {name: value or "" for name, value in values.items()}), encoding="utf-8")
        written.append(path)
    return written


def install_envs(
    config: BaseConfig,
    vault: DotenvVaultCli,
    mode: str,
    dotenv_keys: dict[str, str | None],
    interactive: bool | None = None,
) -> None:
    """Install the env files a `mode` build needs.

    Non-interactive runs (CI) decrypt with the `main` key and the mode's key; interactive
    runs pull from the vault.

    Raises:
        PreconditionError: If `mode` is not a known environment.
        RequiredConfigurationElementError: If a needed decryption key is missing.
    """
    if mode not in REPOSITORY_ENVIRONMENTS:
        raise PreconditionError(f"Unknown mode `{mode}`; expected one of {', '.join(REPOSITORY_ENVIRONMENTS)}.")
    if interactive is None:
        interactive = is_interactive(Settings())
    if interactive:
        pull_envs(config, vault)
        return

    keys: list[str] = []
    for env_name in ("main", mode):
        key = dotenv_keys.get(env_name)
        if not key:
            env_var = f"USER_DOTENV_KEY_{env_name.upper()}"
            raise RequiredConfigurationElementError(name=f"`{env_name}` decryption key", cli_name=env_var, env_name=env_var)
        keys.append(key)
    decrypt_envs(config, vault, keys)
