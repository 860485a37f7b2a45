"""Contains results of application execution."""

from enum import Enum

from skeleton_ops_manager.synchronize.models import ReconciliationAction


class WorkflowStatus(str, Enum):
    """Outcome of a reconciliation workflow."""

    NOT_APPLICABLE = "not_applicable"
    PERMISSION_DENIED = "permission_denied"
    UP_TO_DATE = "up_to_date"
    APPLIED = "applied"
    DRY_RUN = "dry_run"


class WorkflowResult:
    """Contains results of one reconciliation workflow."""

    def __init__(
        self,
        status: WorkflowStatus,
        version: str | None = None,
        actions: dict[str, list[ReconciliationAction]] | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize the result with its status and the actions taken per reconciled domain."""
        self.status = status
        self.version = version
        self.actions = actions or {}
        self.reason = reason

    @property
    def action_count(self) -> int:
        return sum(len(actions) for actions in self.actions.values())
