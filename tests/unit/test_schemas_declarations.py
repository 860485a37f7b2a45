"""Unit tests for the manifest declaration schemas."""

import pytest

from skeleton_ops_manager.configuration.exceptions import PreconditionError
from skeleton_ops_manager.schemas.declarations import normalize_npm_permission, parse_label_declarations, parse_team_declarations


def test_parse_label_declarations_accepts_desc_alias() -> None:
    """Test that labels may use either `description` or the short `desc` key."""
    labels = parse_label_declarations(
        {"docs": {"color": "00ff00", "desc": "Documentation."}, "ops": {"color": "0000ff", "description": "Operations."}},
        "config.c10n.&.github.labels",
    )

    assert labels["docs"].description == "Documentation."
    assert labels["ops"].description == "Operations."


@pytest.mark.parametrize(
    "data",
    [
        pytest.param(["docs"], id="not an object"),
        pytest.param({"docs": {"description": "no color"}}, id="missing color"),
    ],
)
def test_parse_label_declarations_rejects_bad_shapes(data: object) -> None:
    """Test that malformed label declarations are a precondition error."""
    with pytest.raises(PreconditionError, match="labels"):
        parse_label_declarations(data, "config.c10n.&.github.labels")


def test_parse_team_declarations() -> None:
    """Test team declarations, including a missing declaration."""
    assert parse_team_declarations(None, "teams") == {}
    assert parse_team_declarations({"docs": "push"}, "teams") == {"docs": "push"}
    with pytest.raises(PreconditionError):
        parse_team_declarations({"docs": 1}, "teams")


@pytest.mark.parametrize(
    "permission, expected",
    [
        pytest.param("admin", "read-write", id="admin"),
        pytest.param("Maintain", "read-write", id="case-insensitive"),
        pytest.param("push", "read-write", id="push"),
        pytest.param("read-write", "read-write", id="already npm"),
        pytest.param("pull", "read-only", id="pull"),
        pytest.param("triage", "read-only", id="triage"),
    ],
)
def test_normalize_npm_permission(permission: str, expected: str) -> None:
    """Test mapping GitHub permissions to npm permissions."""
    assert normalize_npm_permission(permission) == expected
