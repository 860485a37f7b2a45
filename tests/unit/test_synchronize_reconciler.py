"""Unit tests for the synchronize.reconciler module."""

from typing import Any, AsyncIterator
from unittest.mock import AsyncMock

import pytest

from skeleton_ops_manager.configuration.exceptions import RemoteResponseShapeError
from skeleton_ops_manager.synchronize.models import SyncDecision
from skeleton_ops_manager.synchronize.reconciler import apply, collect_actual, diff, merge_desired, reconcile, should_skip

DESIRED = {"A": "red", "B": "blue"}
ACTUAL = {"B": "green", "C": "black"}


async def pages_of(*pages: list[Any]) -> AsyncIterator[list[Any]]:
    for page in pages:
        yield page


def test_diff_splits_desired_and_actual_into_create_update_delete() -> None:
    """Test the canonical scenario: create A, update B with its desired value, delete C."""
    plan = diff(DESIRED, ACTUAL)

    assert plan.to_create == {"A": "red"}
    assert plan.to_update == {"B": "blue"}
    assert plan.to_delete == {"C": "black"}
    assert plan.kept == {}


def test_diff_never_deletes_protected_names() -> None:
    """Test that a protected name that is not desired is kept instead of deleted."""
    plan = diff(DESIRED, ACTUAL, protect={"C"})

    assert plan.to_delete == {}
    assert plan.kept == {"C": "black"}


@pytest.mark.parametrize(
    "desired, actual",
    [
        pytest.param({}, {}, id="both empty"),
        pytest.param({"A": 1}, {}, id="nothing remote"),
        pytest.param({}, {"A": 1}, id="nothing desired"),
        pytest.param({"A": 1, "B": 2}, {"B": 3, "C": 4, "D": 5}, id="overlapping"),
        pytest.param({"Bug": 1}, {"bug": 1}, id="names are case-sensitive"),
    ],
)
def test_diff_create_and_delete_are_set_differences(desired: dict[str, Any], actual: dict[str, Any]) -> None:
    """Test that creates are desired minus actual and deletes are actual minus desired."""
    plan = diff(desired, actual)

    assert set(plan.to_create) == set(desired) - set(actual)
    assert set(plan.to_delete) == set(actual) - set(desired)
    assert set(plan.to_update) == set(desired) & set(actual)
    assert plan.is_empty is (not desired and not actual)


def test_merge_desired_baseline_wins_and_overrides_can_add() -> None:
    """Test that overrides add new entries but never replace baseline ones."""
    merged = merge_desired({"owners": "admin"}, {"owners": "pull", "docs": "push"})

    assert merged == {"owners": "admin", "docs": "push"}


def test_merge_desired_without_overrides_is_baseline() -> None:
    """Test that a missing override yields a copy of the baseline."""
    baseline = {"owners": "admin"}
    merged = merge_desired(baseline, None)

    assert merged == baseline
    assert merged is not baseline


@pytest.mark.parametrize(
    "current, declared, expected",
    [
        pytest.param("1.0.1", "1.0.1", True, id="same version"),
        pytest.param("1.0.0", "1.0.1", False, id="older marker"),
        pytest.param(None, "1.0.1", False, id="no marker"),
        pytest.param("1.0.1,1.0.0", "1.0.1,1.0.0", True, id="composite marker"),
        pytest.param("1.0.1 ", "1.0.1", False, id="exact string equality"),
    ],
)
def test_should_skip(current: str | None, declared: str, expected: bool) -> None:
    """Test that markers short-circuit only on an exact match."""
    assert should_skip(current, declared) is expected


@pytest.mark.asyncio
async def test_collect_actual_folds_every_page() -> None:
    """Test that entries from all pages end up keyed by name."""
    actual = await collect_actual(pages_of([{"name": "A"}, {"name": "B"}], [{"name": "C"}]), key=lambda entry: entry["name"])

    assert list(actual) == ["A", "B", "C"]
    assert actual["C"] == {"name": "C"}


@pytest.mark.asyncio
async def test_collect_actual_rejects_entries_without_name() -> None:
    """Test that an entry without a usable name is a shape error."""
    with pytest.raises(RemoteResponseShapeError):
        await collect_actual(pages_of([{"name": None}]), key=lambda entry: entry["name"])


@pytest.mark.asyncio
async def test_apply_runs_creates_then_updates_then_deletes() -> None:
    """Test the mutation order and the arguments each callback receives."""
    order: list[tuple[str, str, Any]] = []

    async def record(kind: str, name: str, value: Any) -> None:
        order.append((kind, name, value))

    actions = await apply(
        diff(DESIRED, ACTUAL),
        create=lambda name, value: record("create", name, value),
        update=lambda name, value: record("update", name, value),
        delete=lambda name, value: record("delete", name, value),
    )

    assert order == [("create", "A", "red"), ("update", "B", "blue"), ("delete", "C", "black")]
    assert [action.decision for action in actions] == [SyncDecision.CREATE, SyncDecision.UPDATE, SyncDecision.DELETE]
    assert all(action.applied for action in actions)


@pytest.mark.asyncio
async def test_apply_dry_run_logs_three_actions_and_mutates_nothing(caplog: pytest.LogCaptureFixture) -> None:
    """Test that a dry run only logs the planned actions."""
    create, update, delete = AsyncMock(), AsyncMock(), AsyncMock()
    caplog.set_level("INFO")

    actions = await apply(diff(DESIRED, ACTUAL), create, update, delete, dry_run=True, resource="label")

    create.assert_not_awaited()
    update.assert_not_awaited()
    delete.assert_not_awaited()
    assert len(actions) == 3
    assert not any(action.applied for action in actions)
    assert len([record for record in caplog.records if "Reconciling label" in record.getMessage()]) == 3


@pytest.mark.asyncio
async def test_apply_stops_at_first_failure() -> None:
    """Test that a failing mutation aborts the remaining plan."""
    create = AsyncMock(side_effect=RuntimeError("boom"))
    update, delete = AsyncMock(), AsyncMock()

    with pytest.raises(RuntimeError, match="boom"):
        await apply(diff(DESIRED, ACTUAL), create, update, delete)

    update.assert_not_awaited()
    delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_reconcile_converges_and_a_second_pass_only_updates() -> None:
    """Test that after a successful pass a re-diff has nothing to create or delete."""
    remote: dict[str, str] = dict(ACTUAL)

    async def put(name: str, value: str) -> None:
        remote[name] = value

    async def remove(name: str, _: str) -> None:
        del remote[name]

    async def listing() -> AsyncIterator[list[tuple[str, str]]]:
        yield list(remote.items())

    await reconcile(DESIRED, listing(), key=lambda entry: entry[0], create=put, update=put, delete=remove)

    assert remote == DESIRED
    plan = diff(DESIRED, remote)
    assert plan.to_create == {}
    assert plan.to_delete == {}
    assert plan.to_update == DESIRED
