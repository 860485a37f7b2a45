"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


@dataclass
class GitHubCredentials:
    """Credentials and endpoint for GitHub, passed explicitly to every GitHub client."""

    github_auth_type: GitHubAuthenticationType
    github_api_url: str = "https://api.github.com"
    github_pat_token: str | None = None
    github_app_id: int | None = None
    github_app_private_key_path: Path | None = None
    github_app_installation_id: int | None = None


@dataclass
class BaseConfig:
    """Configuration shared by every command of the CLI."""

    project_dir: Path
    dry_run: bool = False
    debug: bool = False
    github_organization: str = "clevercanyon"
    npmjs_scope: str = "@clevercanyon"
    github_credentials: GitHubCredentials | None = None
    npm_token: str | None = None

    @property
    def child_process_env(self) -> dict[str, str]:
        """Credentials forwarded to external tools (npm, gh, wrangler) as child-process environment only."""
        env: dict[str, str] = {}
        if self.npm_token:
            env["NPM_TOKEN"] = self.npm_token
        if self.github_credentials is not None and self.github_credentials.github_pat_token:
            env["GH_TOKEN"] = self.github_credentials.github_pat_token
            env["GITHUB_TOKEN"] = self.github_credentials.github_pat_token
        return env
