"""Contains utility functions for GitHub interactions."""

import re
from urllib.parse import quote

GITHUB_HTTPS_ORIGIN_PATTERN = re.compile(r"^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?$", re.IGNORECASE)
GITHUB_SSH_ORIGIN_PATTERN = re.compile(r"^git@github(?:\.com)?:([^/]+)/([^/]+?)(?:\.git)?$", re.IGNORECASE)


async def split_repository_in_configuration(repo: str | None) -> tuple[str, str]:
    """Splits the repository in the configuration into owner and repository."""
    if repo is None:
        raise ValueError("GitHub App authentication requires repo in config.")
    repo = repo.strip("/")
    parts = repo.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError("Repository must be in the format 'owner/repo' with no leading/trailing slashes or extra parts.")
    owner, repository = parts
    return owner, repository


def parse_github_origin(url: str) -> tuple[str, str] | None:
    """Parse an `owner, repo` pair out of a GitHub remote URL (HTTPS or SSH).

    Returns None if the URL does not point at github.com.
    """
    url = url.strip()
    for pattern in (GITHUB_HTTPS_ORIGIN_PATTERN, GITHUB_SSH_ORIGIN_PATTERN):
        match = pattern.match(url)
        if match:
            return match.group(1), match.group(2)
    return None


def default_repository_homepage(owner: str, repo: str) -> str:
    """Homepage used when the manifest does not declare one."""
    return f"https://github.com/{quote(owner, safe='')}/{quote(repo, safe='')}#readme"
