"""Utility modules for shared functionality."""

from .constants import (
    ENV_FILES,
    GITHUB_CONFIG_VERSION,
    GITHUB_ENVS_VERSION,
    NPMJS_CONFIG_VERSION,
    REPOSITORY_ENVIRONMENTS,
)
from .helpers import get_path, set_path

__all__ = [
    "ENV_FILES",
    "GITHUB_CONFIG_VERSION",
    "GITHUB_ENVS_VERSION",
    "NPMJS_CONFIG_VERSION",
    "REPOSITORY_ENVIRONMENTS",
    "get_path",
    "set_path",
]
