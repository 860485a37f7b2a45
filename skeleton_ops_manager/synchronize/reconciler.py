"""Declarative reconciliation of a remote collection against a desired state.

Every reconciled domain (repository labels, repository teams, branch protections,
environments, environment secrets, npm organization teams) follows the same shape:

1. fold the paginated remote listing into an `actual` mapping keyed by name,
2. merge the baseline declaration with local overrides into a `desired` mapping,
3. `diff` the two into a ReconciliationPlan,
4. `apply` the plan through the domain's create/update/delete calls.

Matching is by exact, case-sensitive name. Updates are unconditional.
"""

from typing import Any, AsyncIterable, Callable, Collection, Iterable, Mapping

import structlog

from skeleton_ops_manager.configuration.exceptions import RemoteResponseShapeError
from skeleton_ops_manager.synchronize.models import (
    CreateFn,
    DeleteFn,
    ReconciliationAction,
    ReconciliationPlan,
    SyncDecision,
    UpdateFn,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def merge_desired(baseline: Mapping[str, Any], override: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Merge local overrides with the baseline declaration; baseline entries win on conflicts.

    Entries only present in `override` are kept as-is, so local configuration can add
    resources but never change or drop a baseline one.
    """
    merged: dict[str, Any] = dict(override or {})
    merged.update(baseline)
    return merged


def diff(desired: Mapping[str, Any], actual: Mapping[str, Any], protect: Collection[str] = ()) -> ReconciliationPlan:
    """Compute the plan converging `actual` to `desired`.

    Protected names are never deleted; when they exist remotely but are not desired
    they end up in `kept`.
    """
    plan = ReconciliationPlan()
    for name, attributes in desired.items():
        if name in actual:
            plan.to_update[name] = attributes
        else:
            plan.to_create[name] = attributes
    for name, attributes in actual.items():
        if name in desired:
            continue
        if name in protect:
            plan.kept[name] = attributes
        else:
            plan.to_delete[name] = attributes
    return plan


def should_skip(current_marker: str | None, declared_version: str) -> bool:
    """Whether the persisted version marker already matches the declared version."""
    return current_marker == declared_version


async def collect_actual(pages: AsyncIterable[Iterable[Any]], key: Callable[[Any], str]) -> dict[str, Any]:
    """Fold a forward-only sequence of pages into a single mapping keyed by `key(entry)`."""
    actual: dict[str, Any] = {}
    async for page in pages:
        for entry in page:
            name = key(entry)
            if not isinstance(name, str) or not name:
                raise RemoteResponseShapeError("remote listing", f"entry without a usable name: {entry!r}")
            actual[name] = entry
    return actual


async def apply(
    plan: ReconciliationPlan,
    create: CreateFn,
    update: UpdateFn,
    delete: DeleteFn,
    dry_run: bool = False,
    resource: str = "resource",
) -> list[ReconciliationAction]:
    """Apply a plan: creates, then updates, then deletes.

    Each action is logged before its mutation runs. With `dry_run` nothing is mutated.
    The first failing mutation propagates and aborts the rest of the plan.
    """
    actions: list[ReconciliationAction] = []
    steps: list[tuple[SyncDecision, dict[str, Any], Callable[[str, Any], Any]]] = [
        (SyncDecision.CREATE, plan.to_create, create),
        (SyncDecision.UPDATE, plan.to_update, update),
        (SyncDecision.DELETE, plan.to_delete, delete),
    ]
    for decision, entries, mutate in steps:
        for name, attributes in entries.items():
            action = ReconciliationAction(decision=decision, name=name, attributes=attributes)
            actions.append(action)
            logger.info(f"Reconciling {resource}", decision=decision.value, name=name, dry_run=dry_run)
            if dry_run:
                continue
            await mutate(name, attributes)
            action.applied = True
    return actions


async def reconcile(
    desired: Mapping[str, Any],
    pages: AsyncIterable[Iterable[Any]],
    key: Callable[[Any], str],
    create: CreateFn,
    update: UpdateFn,
    delete: DeleteFn,
    protect: Collection[str] = (),
    dry_run: bool = False,
    resource: str = "resource",
) -> list[ReconciliationAction]:
    """Collect the actual state, diff it against `desired`, and apply the result."""
    actual = await collect_actual(pages, key)
    plan = diff(desired, actual, protect)
    logger.info(f"Computed {resource} reconciliation plan", **plan.summary)
    return await apply(plan, create, update, delete, dry_run=dry_run, resource=resource)
