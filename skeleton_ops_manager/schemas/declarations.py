"""Pydantic schemas for desired-state declarations read from the project manifest."""

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from skeleton_ops_manager.configuration.exceptions import PreconditionError

NPM_READ_WRITE_PATTERN = re.compile(r"^(?:read-write|push|maintain|admin)$", re.IGNORECASE)


class LabelModel(BaseModel):
    """Pydantic model for a GitHub label declaration."""

    color: str
    description: str | None = Field(default=None, validation_alias=AliasChoices("description", "desc"))


def parse_label_declarations(data: Any, source: str) -> dict[str, LabelModel]:
    """Validate a `{label name: {color, description}}` mapping from the manifest."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PreconditionError(f"`{source}` must be an object keyed by label name.")
    try:
        return {name: LabelModel.model_validate(attributes) for name, attributes in data.items()}
    except ValidationError as exc:
        raise PreconditionError(f"Invalid label declaration in `{source}`: {exc}") from exc


def parse_team_declarations(data: Any, source: str) -> dict[str, str]:
    """Validate a `{team slug: permission}` mapping from the manifest."""
    if data is None:
        return {}
    if not isinstance(data, dict) or not all(isinstance(value, str) for value in data.values()):
        raise PreconditionError(f"`{source}` must be an object mapping team slugs to permissions.")
    return dict(data)


def normalize_npm_permission(permission: str) -> str:
    """Map a GitHub or npm permission to npm's `read-write` / `read-only`."""
    return "read-write" if NPM_READ_WRITE_PATTERN.match(permission) else "read-only"
