"""Data models for reconciling remote collections against a desired state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, TypeAlias


class SyncDecision(str, Enum):
    """Mutation chosen for a single named resource."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


Attributes: TypeAlias = Mapping[str, Any]

CreateFn: TypeAlias = Callable[[str, Any], Awaitable[Any]]
UpdateFn: TypeAlias = Callable[[str, Any], Awaitable[Any]]
DeleteFn: TypeAlias = Callable[[str, Any], Awaitable[Any]]


@dataclass
class ReconciliationPlan:
    """Disjoint create/update/delete/kept sets computed from desired and actual state.

    `to_create` and `to_update` carry desired attributes, `to_delete` and `kept`
    carry the actual (remote) attributes.
    """

    to_create: dict[str, Any] = field(default_factory=dict)
    to_update: dict[str, Any] = field(default_factory=dict)
    to_delete: dict[str, Any] = field(default_factory=dict)
    kept: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to create, update, or delete."""
        return not (self.to_create or self.to_update or self.to_delete)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "create": len(self.to_create),
            "update": len(self.to_update),
            "delete": len(self.to_delete),
            "kept": len(self.kept),
        }


@dataclass
class ReconciliationAction:
    """A single logged action of an apply pass."""

    decision: SyncDecision
    name: str
    attributes: Any = None
    applied: bool = False
