"""Reconcile configuration between CLI arguments and environment variables."""

from pathlib import Path

from skeleton_ops_manager.configuration.exceptions import (
    GitHubAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from skeleton_ops_manager.configuration.models import BaseConfig, GitHubAuthenticationType, GitHubCredentials


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    Args:
        github_pat_token (str | None): The GitHub PAT token.
        github_app_id (int | None): The GitHub App ID.
        github_app_private_key_path (str | None): The path to the GitHub App private key.
        github_app_installation_id (int | None): The GitHub App installation ID.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If both PAT and App configurations are undefined.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication used.
    """
    if github_pat_token and (github_app_id or github_app_private_key_path or github_app_installation_id):
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")

    if github_pat_token:
        return GitHubAuthenticationType.PAT

    if github_app_id and github_app_private_key_path and github_app_installation_id:
        return GitHubAuthenticationType.APP
    elif github_app_id or github_app_private_key_path or github_app_installation_id:
        missing_settings: list[dict[str, str]] = []
        if not github_app_id:
            missing_settings.append(
                {
                    "name": "GitHub App ID",
                    "cli_name": "github_app_id",
                    "env_name": "GITHUB_APP_ID",
                }
            )
        if not github_app_private_key_path:
            missing_settings.append(
                {
                    "name": "GitHub App private key path",
                    "cli_name": "github_app_private_key_path",
                    "env_name": "GITHUB_APP_PRIVATE_KEY_PATH",
                }
            )
        if not github_app_installation_id:
            missing_settings.append(
                {
                    "name": "GitHub App installation ID",
                    "cli_name": "github_app_installation_id",
                    "env_name": "GITHUB_APP_INSTALLATION_ID",
                }
            )
        msg = "Incomplete GitHub App configuration - missing settings include " + ", ".join(
            f"{setting['name']} (command line option {setting['cli_name']}, environment variable {setting['env_name']})"
            for setting in missing_settings
        )
        raise GitHubAuthenticationConfigurationUndefinedError(msg)
    else:
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configuration provided. Please provide either a PAT (USER_GITHUB_TOKEN) or a GitHub App configuration."
        )


async def reconcile_base_configuration(
    cli_project_dir: Path,
    cli_dry_run: bool = False,
    cli_debug: bool = False,
    cli_github_organization: str = "clevercanyon",
    cli_npmjs_scope: str = "@clevercanyon",
    cli_github_api_url: str = "https://api.github.com",
    cli_github_pat_token: str | None = None,
    cli_github_app_id: int | None = None,
    cli_github_app_private_key_path: Path | None = None,
    cli_github_app_installation_id: int | None = None,
    cli_npm_token: str | None = None,
    require_github: bool = False,
) -> BaseConfig:
    """Build the configuration for a command from already-merged CLI/environment values.

    GitHub credentials are validated only when present, or always when the command
    requires them.
    """
    if not cli_project_dir.is_dir():
        raise RequiredConfigurationElementError(name="Project directory", cli_name="project_dir", env_name="PROJECT_DIR")

    github_credentials: GitHubCredentials | None = None
    has_github_settings = any((cli_github_pat_token, cli_github_app_id, cli_github_app_private_key_path, cli_github_app_installation_id))
    if require_github or has_github_settings:
        github_auth_type = await validate_github_authentication_configuration(
            github_pat_token=cli_github_pat_token,
            github_app_id=cli_github_app_id,
            github_app_private_key_path=cli_github_app_private_key_path,
            github_app_installation_id=cli_github_app_installation_id,
        )
        github_credentials = GitHubCredentials(
            github_auth_type=github_auth_type,
            github_api_url=cli_github_api_url,
            github_pat_token=cli_github_pat_token,
            github_app_id=cli_github_app_id,
            github_app_private_key_path=cli_github_app_private_key_path,
            github_app_installation_id=cli_github_app_installation_id,
        )

    return BaseConfig(
        project_dir=cli_project_dir.resolve(),
        dry_run=cli_dry_run,
        debug=cli_debug,
        github_organization=cli_github_organization,
        npmjs_scope=cli_npmjs_scope,
        github_credentials=github_credentials,
        npm_token=cli_npm_token,
    )
