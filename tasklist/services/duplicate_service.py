"""Duplicate detection for new tasks.

A proposed title collides with an existing task of the same tenant, location and
type while that task is still OPEN or IN_PROGRESS. Finished or archived tasks
never block re-adding the same item.
"""

import logging

from tasklist.core.config import settings
from tasklist.core.logging import span
from tasklist.core.similarity import similarity
from tasklist.core.task_store import TaskStore
from tasklist.domain.task import Task, TaskStatus, TaskType
from tasklist.models.service_models import DuplicateCheckResult


logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset({TaskStatus.OPEN, TaskStatus.IN_PROGRESS})


def normalize_title(title: str) -> str:
    """Trimmed, case-folded title used for exact comparison."""
    return title.strip().lower()


def is_similar_title(candidate: str, title: str, *, threshold: float) -> bool:
    """Exact match after normalization, or similarity strictly above ``threshold``."""
    if normalize_title(candidate) == normalize_title(title):
        return True
    return similarity(candidate, title) > threshold


async def check_duplicates(
    store: TaskStore,
    *,
    title: str,
    task_type: TaskType,
    tenant_id: str,
    location_id: str,
    requester_id: str | None = None,
    threshold: float | None = None,
    max_results: int | None = None,
) -> DuplicateCheckResult:
    """Find open tasks whose title matches ``title``.

    Args:
        store: Task store to read from
        title: Proposed title
        task_type: Only tasks of this type are compared
        tenant_id: Tenant scope
        location_id: Location scope
        requester_id: When given, other users' personal tasks are not compared
        threshold: Similarity threshold (defaults to settings)
        max_results: Maximum matches returned (defaults to settings)

    Returns:
        DuplicateCheckResult with at most ``max_results`` similar tasks
    """
    with span("duplicate_service.check_duplicates"):
        threshold = settings.duplicate_similarity_threshold if threshold is None else threshold
        max_results = settings.duplicate_max_results if max_results is None else max_results

        candidates = await store.list_tasks(
            tenant_id=tenant_id,
            location_id=location_id,
            task_type=task_type,
            statuses=ACTIVE_STATUSES,
        )

        matches: list[Task] = []
        for task in candidates:
            # Store filters are advisory; re-check scope here
            if (
                task.tenant_id != tenant_id
                or task.location_id != location_id
                or task.type != task_type
                or task.status not in ACTIVE_STATUSES
            ):
                continue
            if requester_id is not None and task.is_personal and task.created_by != requester_id:
                continue
            if is_similar_title(task.title, title, threshold=threshold):
                matches.append(task)

        if not matches:
            return DuplicateCheckResult(is_duplicate=False)

        logger.info(
            "Found %d similar task(s) for title %r",
            len(matches),
            title,
            extra={"tenant_id": tenant_id, "location_id": location_id, "type": str(task_type)},
        )
        return DuplicateCheckResult(
            is_duplicate=True,
            similar_tasks=matches[:max_results],
            message=f"Found {len(matches)} similar task(s)",
        )
