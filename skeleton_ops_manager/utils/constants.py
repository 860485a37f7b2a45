"""Shared constants used across the application."""

# This file is intended to hold shared constants.

import re

# Declaration Versions
# --------------------
# Bump the matching version whenever a baseline declaration below (or the
# workflow that applies it) changes, otherwise existing projects short-circuit.

GITHUB_CONFIG_VERSION = "1.0.1"
"""Version of the GitHub repository standards (settings, labels, teams, branch protections)."""

GITHUB_ENVS_VERSION = "1.0.0"
"""Version of the GitHub repository environments and their secrets."""

NPMJS_CONFIG_VERSION = "1.0.0"
"""Version of the npmjs package standards (organization team access)."""

# Manifest Paths
# --------------

MANIFEST_FILE_NAME = "package.json"
"""Name of the project manifest file in the project directory."""

GITHUB_CONFIG_VERSION_PATH = "config.c10n.&.github.configVersion"
GITHUB_ENVS_VERSION_PATH = "config.c10n.&.github.envsVersion"
GITHUB_LABELS_PATH = "config.c10n.&.github.labels"
GITHUB_TEAMS_PATH = "config.c10n.&.github.teams"
NPMJS_CONFIG_VERSIONS_PATH = "config.c10n.&.npmjs.configVersions"
NPMJS_TEAMS_PATH = "config.c10n.&.npmjs.teams"

# Organization Defaults
# ---------------------

DEFAULT_GITHUB_ORGANIZATION = "clevercanyon"
"""GitHub organization whose repositories receive the org-wide standards."""

DEFAULT_NPMJS_SCOPE = "@clevercanyon"
"""npm scope whose packages receive the org-wide standards."""

NPMJS_REGISTRY_URL = "https://registry.npmjs.org"

# Baseline Declarations
# ---------------------

BASELINE_GITHUB_LABELS: dict[str, dict[str, str]] = {
    "bug report": {"color": "b60205", "description": "Something isn’t working."},
    "good first issue": {"color": "fef2c0", "description": "Good first issue for newcomers."},
    "question": {"color": "0e8a16", "description": "Something is being asked."},
    "request": {"color": "1d76db", "description": "Something is being requested."},
    "robotic": {"color": "eeeeee", "description": "Something created robotically."},
    "suggestion": {"color": "fbca04", "description": "Something is being suggested."},
}
"""Labels every repository must carry. Overrides from the manifest never replace these."""

BASELINE_GITHUB_TEAMS: dict[str, str] = {"owners": "admin", "security-managers": "pull"}
"""Team slug to repository permission. No exceptions."""

BASELINE_NPMJS_TEAMS: dict[str, str] = {
    "developers": "read-write",
    "owners": "read-write",
    "security-managers": "read-only",
}
"""Team name to package permission. No exceptions."""

PROTECTED_BRANCHES: tuple[str, ...] = ("main",)
"""Branches that are always protected and never lose their protection."""

MAIN_BRANCH_PROTECTION: dict[str, object] = {
    "lock_branch": False,
    "block_creations": True,
    "allow_deletions": False,
    "allow_fork_syncing": False,
    "allow_force_pushes": False,
    "required_signatures": True,
    "required_linear_history": True,
    "required_conversation_resolution": True,
    "required_status_checks": None,
    "restrictions": {"users": [], "teams": ["owners"], "apps": []},
    "required_pull_request_reviews": {
        "dismiss_stale_reviews": True,
        "require_code_owner_reviews": True,
        "required_approving_review_count": 1,
        "require_last_push_approval": True,
        "dismissal_restrictions": {"users": [], "teams": ["owners"], "apps": []},
        "bypass_pull_request_allowances": {"users": [], "teams": ["owners"], "apps": []},
    },
    "enforce_admins": False,
}
"""Branch protection policy applied to every protected branch."""

REPOSITORY_SETTINGS: dict[str, object] = {
    "has_wiki": True,
    "has_issues": True,
    "has_projects": True,
    "has_discussions": True,
    "has_downloads": True,
    "allow_auto_merge": False,
    "allow_squash_merge": True,
    "allow_merge_commit": False,
    "allow_rebase_merge": False,
    "allow_update_branch": True,
    "delete_branch_on_merge": True,
    "merge_commit_title": "MERGE_MESSAGE",
    "merge_commit_message": "PR_TITLE",
    "squash_merge_commit_title": "PR_TITLE",
    "squash_merge_commit_message": "COMMIT_MESSAGES",
    "web_commit_signoff_required": False,
}
"""Repository settings applied alongside the org-wide standards."""

# Environments
# ------------

ENV_FILES: dict[str, str] = {
    "main": "dev/.envs/.env",
    "dev": "dev/.envs/.env.dev",
    "ci": "dev/.envs/.env.ci",
    "stage": "dev/.envs/.env.stage",
    "prod": "dev/.envs/.env.prod",
}
"""Environment name to env file path, relative to the project directory."""

REPOSITORY_ENVIRONMENTS: tuple[str, ...] = tuple(name for name in ENV_FILES if name != "main")
"""Environments mirrored as GitHub repository environments."""

ENVIRONMENT_BRANCH_POLICIES: dict[str, tuple[str, ...]] = {"prod": ("main",)}
"""Deployment branch policies per environment. Unlisted environments allow no branches."""

DOTENV_KEY_PATTERN = re.compile(r"\bdotenv://:key_.+?\?environment=([^\s]+)", re.IGNORECASE)
"""Pattern to match dotenv-vault decryption keys, capturing the environment name."""

# Release Constants
# -----------------

DIST_ZIP_FILE_NAME = ".~dist.zip"
"""Distribution archive produced by the Vite build."""

RELEASE_ASSET_NAME = "dist.zip"

ROBOTIC_COMMIT_SUFFIX = "[robotic]"
