"""Sets up the authenticated githubkit client."""

from typing import TypeAlias

import structlog
from githubkit import GitHub
from githubkit.auth import AppAuthStrategy, AppInstallationAuthStrategy, TokenAuthStrategy

from skeleton_ops_manager.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from skeleton_ops_manager.configuration.models import GitHubAuthenticationType, GitHubCredentials

logger = structlog.get_logger(__name__)

GitHubClient: TypeAlias = GitHub[AppInstallationAuthStrategy] | GitHub[TokenAuthStrategy]


def get_github_client(credentials: GitHubCredentials) -> GitHubClient:
    """Returns a GitHub client authenticated as the configured App installation or with the PAT.

    Supports a custom base URL for GitHub Enterprise Server (GHES). HTTP caching is
    disabled so every listing reflects the current remote state.
    """
    if credentials.github_auth_type == GitHubAuthenticationType.APP:
        if not (credentials.github_app_id and credentials.github_app_private_key_path and credentials.github_app_installation_id):
            raise GitHubAuthenticationConfigurationUndefinedError(
                "GitHub App authentication requires an app ID, a private key path, and an installation ID."
            )
        private_key = credentials.github_app_private_key_path.read_text(encoding="utf-8")
        app_auth = AppAuthStrategy(app_id=credentials.github_app_id, private_key=private_key)
        logger.debug("Authenticating as GitHub App installation", installation_id=credentials.github_app_installation_id)
        return GitHub(
            auth=app_auth.as_installation(credentials.github_app_installation_id),
            base_url=credentials.github_api_url,
            http_cache=False,
        )

    if not credentials.github_pat_token:
        raise GitHubAuthenticationConfigurationUndefinedError("GitHub PAT authentication requires USER_GITHUB_TOKEN.")
    return GitHub(auth=TokenAuthStrategy(credentials.github_pat_token), base_url=credentials.github_api_url, http_cache=False)
