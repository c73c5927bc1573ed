"""Per-task visibility and permission rules.

Rules apply in this order:

1. Tenant isolation: tasks of another tenant do not exist for the caller.
2. Location scope: tasks of another location do not exist unless ``can_view_all``.
3. Personal privacy: a personal task is visible to its creator only. No role
   flag overrides this.
4. Mutation, assignment and deletion each require their own role or relation.

Scope violations raise NotFoundError so that existence across tenants is never
confirmed. Personal and permission violations raise ForbiddenError.
"""

import logging

from tasklist.core.errors import ConflictError, ForbiddenError, NotFoundError
from tasklist.core.logging import log_with_user_context
from tasklist.domain.task import Task, TaskPermissionContext


logger = logging.getLogger(__name__)


def in_scope(task: Task, context: TaskPermissionContext) -> bool:
    """Tenant and location check."""
    if task.tenant_id != context.tenant_id:
        return False
    return context.can_view_all or task.location_id == context.location_id


def owns_personal(task: Task, context: TaskPermissionContext) -> bool:
    """True for non-personal tasks, or personal tasks created by the requester."""
    return not task.is_personal or task.created_by == context.user_id


def is_listed(task: Task, context: TaskPermissionContext, *, include_personal: bool) -> bool:
    """Whether a task appears in a bulk listing for this requester.

    Personal tasks appear only when ``include_personal`` is set and the requester
    created them.
    """
    if not in_scope(task, context):
        return False
    if task.is_personal:
        return include_personal and task.created_by == context.user_id
    return True


def ensure_visible(task: Task | None, task_id: str, context: TaskPermissionContext) -> Task:
    """Return the task if the requester may see it.

    Raises:
        NotFoundError: If the task is missing or outside the tenant/location scope
        ForbiddenError: If it is another user's personal task
    """
    if task is None or not in_scope(task, context):
        raise NotFoundError(f"Task {task_id} not found")

    if not owns_personal(task, context):
        log_with_user_context(
            logger, "warning", "Blocked access to personal task", user_id=context.user_id, task_id=task_id
        )
        raise ForbiddenError("Cannot access personal tasks of other users")

    return task


def ensure_can_update(task: Task, context: TaskPermissionContext) -> None:
    """Creator, assignee, manager or full-management role may mutate a task."""
    is_creator = task.created_by == context.user_id
    is_assignee = context.user_id in task.assignee_ids
    is_manager = context.is_manager or context.can_manage_all

    if not (is_creator or is_assignee or is_manager):
        log_with_user_context(logger, "warning", "Update denied", user_id=context.user_id, task_id=task.id)
        raise ForbiddenError("No permission to update this task")


def ensure_can_assign(task: Task, context: TaskPermissionContext) -> None:
    """Personal tasks never take assignees; otherwise creator or manager only."""
    if task.is_personal:
        raise ConflictError("Cannot assign personal tasks")

    if task.created_by != context.user_id and not context.is_manager:
        log_with_user_context(logger, "warning", "Assignment denied", user_id=context.user_id, task_id=task.id)
        raise ForbiddenError("Only task creator or manager can assign")


def ensure_can_delete(task: Task, context: TaskPermissionContext) -> None:
    """Creator or full-management role may delete (archive) a task."""
    if task.created_by != context.user_id and not context.can_manage_all:
        log_with_user_context(logger, "warning", "Deletion denied", user_id=context.user_id, task_id=task.id)
        raise ForbiddenError("Only task creator or manager can delete")
