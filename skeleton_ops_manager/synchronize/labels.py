"""Contains synchronization logic for GitHub repository labels."""

import structlog

from skeleton_ops_manager.github.abc import GitHubClientBase
from skeleton_ops_manager.github.records import LabelRecord
from skeleton_ops_manager.schemas.declarations import LabelModel
from skeleton_ops_manager.synchronize.models import ReconciliationAction
from skeleton_ops_manager.synchronize.reconciler import merge_desired, reconcile
from skeleton_ops_manager.utils.constants import BASELINE_GITHUB_LABELS

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def desired_labels(overrides: dict[str, LabelModel] | None = None) -> dict[str, LabelModel]:
    """Baseline labels merged over the manifest's label declarations.

    Key is label name.
    """
    baseline = {name: LabelModel.model_validate(attributes) for name, attributes in BASELINE_GITHUB_LABELS.items()}
    return merge_desired(baseline, overrides)


async def sync_github_labels(
    github_adapter: GitHubClientBase,
    desired: dict[str, LabelModel],
    dry_run: bool = False,
) -> list[ReconciliationAction]:
    """Converge the repository's labels to `desired`, deleting every undeclared label."""

    async def create(name: str, label: LabelModel) -> None:
        await github_adapter.create_label(name=name, color=label.color, description=label.description)

    async def update(name: str, label: LabelModel) -> None:
        await github_adapter.update_label(name=name, color=label.color, description=label.description)

    async def delete(name: str, _: LabelRecord) -> None:
        await github_adapter.delete_label(name)

    return await reconcile(
        desired,
        github_adapter.iter_labels(),
        key=lambda label: label.name,
        create=create,
        update=update,
        delete=delete,
        dry_run=dry_run,
        resource="repository label",
    )
