"""Pydantic records for the GitHub REST responses we consume.

Responses are validated here, at the adapter boundary, so the rest of the
application never sees a partially shaped payload.
"""

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from skeleton_ops_manager.configuration.exceptions import RemoteResponseShapeError

RecordT = TypeVar("RecordT", bound=BaseModel)


class AccountRecord(BaseModel):
    """Owner or organization of a repository."""

    login: str
    type: str | None = None


class RepositoryPermissionsRecord(BaseModel):
    """Permissions of the authenticated user on a repository."""

    admin: bool = False
    push: bool = False
    pull: bool = False


class RepositoryRecord(BaseModel):
    """Repository metadata needed to decide whether standards apply."""

    id: int
    name: str
    full_name: str
    default_branch: str
    owner: AccountRecord
    organization: AccountRecord | None = None
    permissions: RepositoryPermissionsRecord | None = None

    @property
    def is_organization_owned(self) -> bool:
        return self.owner.type == "Organization"

    @property
    def organization_login(self) -> str | None:
        return self.organization.login if self.organization else None

    @property
    def user_can_admin(self) -> bool:
        return bool(self.permissions and self.permissions.admin)


class LabelRecord(BaseModel):
    """A repository label."""

    name: str
    color: str
    description: str | None = None


class TeamRecord(BaseModel):
    """A team with access to a repository."""

    slug: str
    name: str | None = None
    permission: str | None = None


class BranchRecord(BaseModel):
    """A repository branch."""

    name: str
    protected: bool | None = None


class EnvironmentRecord(BaseModel):
    """A deployment environment."""

    id: int
    name: str


class BranchPolicyRecord(BaseModel):
    """A deployment branch policy of an environment."""

    id: int
    name: str


class SecretRecord(BaseModel):
    """An environment secret (the value is never returned by GitHub)."""

    name: str


class PublicKeyRecord(BaseModel):
    """Public key used to seal secret values for an environment."""

    key_id: str
    key: str


class ReleaseRecord(BaseModel):
    """A created release."""

    id: int
    tag_name: str
    upload_url: str
    html_url: str | None = None


def parse_record(model: Type[RecordT], data: Any, source: str) -> RecordT:
    """Validate a single response object, raising RemoteResponseShapeError on mismatch."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RemoteResponseShapeError(source, str(exc)) from exc


def parse_records(model: Type[RecordT], data: Any, source: str) -> list[RecordT]:
    """Validate a list of response objects."""
    if not isinstance(data, list):
        raise RemoteResponseShapeError(source, f"expected a list, got {type(data).__name__}")
    return [parse_record(model, item, source) for item in data]
