"""Reads and writes the project manifest (`package.json`)."""

import json
import re
from pathlib import Path
from typing import Any, Self

import semver
import structlog

from skeleton_ops_manager.configuration.exceptions import PreconditionError
from skeleton_ops_manager.utils.constants import MANIFEST_FILE_NAME
from skeleton_ops_manager.utils.helpers import get_path, set_path

logger = structlog.get_logger(__name__)

TEMPLATE_REPOSITORY_PATTERN = re.compile(r"[:/][^/]+/skeleton(?:\.[^/]+)?(?:\.git)?$", re.IGNORECASE)
NPM_SCOPED_NAME_PATTERN = re.compile(r"^(@[^/]+)/([^/]+)$")
NPM_NAME_PATTERN = re.compile(r"^([^/]+)$")


class ProjectManifest:
    """In-memory copy of `package.json`.

    Loaded once at the start of an operation and written back with `save()` once at
    the end. Concurrent invocations against the same project are not safe.
    """

    def __init__(self, path: Path, data: dict[str, Any]) -> None:
        self.path = path
        self.data = data

    @classmethod
    def load(cls, project_dir: Path) -> Self:
        """Load the manifest from a project directory.

        Raises:
            PreconditionError: If the file is missing or is not a JSON object.
        """
        path = project_dir / MANIFEST_FILE_NAME
        if not path.exists():
            raise PreconditionError(f"Missing `./{MANIFEST_FILE_NAME}` in {project_dir}.")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PreconditionError(f"Unable to parse `./{MANIFEST_FILE_NAME}`: {exc}") from exc
        if not isinstance(data, dict):
            raise PreconditionError(f"Unable to parse `./{MANIFEST_FILE_NAME}`: not a JSON object.")
        return cls(path, data)

    def save(self) -> None:
        """Write the manifest back with 4-space indentation."""
        self.path.write_text(json.dumps(self.data, indent=4, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.debug("Saved project manifest", path=str(self.path))

    def get(self, path: str, default: Any = None) -> Any:
        return get_path(self.data, path, default)

    def set(self, path: str, value: Any) -> None:
        set_path(self.data, path, value)

    @property
    def name(self) -> str:
        return str(self.data.get("name") or "")

    @property
    def version(self) -> str:
        return str(self.data.get("version") or "")

    @property
    def private(self) -> bool | None:
        return self.data.get("private")

    @property
    def homepage(self) -> str | None:
        return self.data.get("homepage") or None

    @property
    def description(self) -> str | None:
        return self.data.get("description") or None

    @property
    def repository(self) -> str:
        """Repository URL; npm allows either a string or a `{type, url}` object."""
        repository = self.data.get("repository") or ""
        if isinstance(repository, dict):
            repository = repository.get("url") or ""
        return str(repository)

    def is_repo(self, owner_repo: str) -> bool:
        """Whether the manifest's repository URL points at `owner/repo`."""
        pattern = re.compile("[:/]" + re.escape(owner_repo) + r"(?:\.git)?$", re.IGNORECASE)
        return bool(pattern.search(self.repository))

    def is_template_repo(self) -> bool:
        """Whether this project is the skeleton template itself."""
        return bool(TEMPLATE_REPOSITORY_PATTERN.search(self.repository))

    def npm_origin(self) -> tuple[str, str]:
        """Split the package name into `(scope, name)`; scope is empty when unscoped.

        Raises:
            PreconditionError: If the package name is empty or malformed.
        """
        match = NPM_SCOPED_NAME_PATTERN.match(self.name)
        if match:
            return match.group(1), match.group(2)
        match = NPM_NAME_PATTERN.match(self.name)
        if match:
            return "", match.group(1)
        raise PreconditionError("Package does not have an npmjs origin.")


def is_prerelease(version: str) -> bool:
    """Whether a semantic version carries a prerelease part (e.g. `1.0.0-beta.1`)."""
    return semver.Version.parse(version).prerelease is not None


def next_version(version: str) -> str:
    """Increment the prerelease part when there is one, the patch part otherwise.

    An empty version counts as `0.0.0`.

    Raises:
        PreconditionError: If `version` is not a semantic version.
    """
    current = version or "0.0.0"
    if not semver.Version.is_valid(current):
        raise PreconditionError(f"Not a semantic version: `{version}`.")
    parsed = semver.Version.parse(current)
    bumped = parsed.bump_prerelease() if parsed.prerelease else parsed.bump_patch()
    return str(bumped)


def increment_version(manifest: ProjectManifest, dry_run: bool = False) -> str:
    """Bump the manifest's version and save it, unless dry run. Returns the new version."""
    new_version = next_version(manifest.version)
    logger.info("Incrementing package version", old_version=manifest.version or None, new_version=new_version, dry_run=dry_run)
    if not dry_run:
        manifest.data["version"] = new_version
        manifest.save()
    return new_version
