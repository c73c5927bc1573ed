"""Task engine: create, update, transition, assign, query and archive tasks.

Every mutating operation fetches the task through the access-control rules
first, then applies business checks (duplicates, transitions, permissions),
writes the task once and appends one history entry.
"""

import json
import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, tzinfo
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tasklist.core.config import Constants, Settings, settings as default_settings
from tasklist.core.errors import ConflictError, DuplicateTaskError, ValidationError
from tasklist.core.logging import log_with_context, log_with_user_context, span
from tasklist.core.task_store import TaskStore
from tasklist.domain.create_models import TaskCreate
from tasklist.domain.query_models import TaskFilter
from tasklist.domain.task import (
    HistoryAction,
    Task,
    TaskHistoryEntry,
    TaskPermissionContext,
    TaskPriority,
    TaskStatus,
    TaskType,
    as_utc,
)
from tasklist.domain.update_models import TaskAssignment, TaskStatusChange, TaskUnassignment, TaskUpdate
from tasklist.models.service_models import DuplicateCheckResult, TaskListResult, TaskStatistics
from tasklist.services import access_control, duplicate_service, task_state_machine
from tasklist.services.analytics_service import aggregate_statistics


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Clock = Callable[[], datetime]

_SHOPPING_ONLY_FIELDS = ("quantity", "target_location")
_REQUIRED_FIELDS = ("title", "priority")
_CLEARABLE_TEXT_FIELDS = ("description", "target_location")
_ACTIVE_STATUSES = duplicate_service.ACTIVE_STATUSES
_PRIORITY_RANK = {priority: rank for rank, priority in enumerate(TaskPriority)}
_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def new_id() -> str:
    """Opaque, collision-resistant identifier."""
    return uuid.uuid4().hex


def _validate(model_cls: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """Validate input at the engine boundary, raising the engine's ValidationError."""
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        msg = f"Invalid {model_cls.__name__}: {e.error_count()} validation error(s)"
        raise ValidationError(msg, errors=e.errors(include_url=False, include_context=False)) from e


def _matches_filter(task: Task, query: TaskFilter, search: str | None) -> bool:  # noqa: PLR0911
    """Apply the optional listing filters to one visible task."""
    if query.type is not None and task.type != query.type:
        return False
    if query.status is not None and task.status != query.status:
        return False
    if query.assignee_id is not None and query.assignee_id not in task.assignee_ids:
        return False
    if query.created_by is not None and task.created_by != query.created_by:
        return False
    if query.priority is not None and task.priority != query.priority:
        return False
    if query.due_date_from is not None and (task.due_date is None or task.due_date < query.due_date_from):
        return False
    if query.due_date_to is not None and (task.due_date is None or task.due_date > query.due_date_to):
        return False
    if search is not None:
        in_title = search in task.title.lower()
        in_description = task.description is not None and search in task.description.lower()
        if not (in_title or in_description):
            return False
    return True


class TaskEngine:
    """Orchestrates task operations over an injected store.

    Args:
        store: Any object implementing the TaskStore protocol
        settings: Engine settings (defaults to the global settings)
        clock: Callable returning the current time (defaults to UTC now)
    """

    def __init__(
        self,
        store: TaskStore,
        *,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or default_settings
        self._clock = clock or utc_now

    def _now(self) -> datetime:
        now = as_utc(self._clock())
        assert now is not None
        return now

    async def _record_history(
        self,
        *,
        task_id: str,
        action: HistoryAction,
        previous_value: str | None,
        new_value: str | None,
        performed_by: str,
        performed_at: datetime,
    ) -> TaskHistoryEntry:
        entry = TaskHistoryEntry(
            id=new_id(),
            task_id=task_id,
            action=action,
            previous_value=previous_value,
            new_value=new_value,
            performed_by=performed_by,
            performed_at=performed_at,
        )
        return await self._store.append_history(entry)

    async def check_duplicates(
        self, title: str, task_type: TaskType, context: TaskPermissionContext
    ) -> DuplicateCheckResult:
        """Compare a proposed title with open tasks at the requester's location."""
        return await duplicate_service.check_duplicates(
            self._store,
            title=title,
            task_type=task_type,
            tenant_id=context.tenant_id,
            location_id=context.location_id,
            requester_id=context.user_id,
            threshold=self._settings.duplicate_similarity_threshold,
            max_results=self._settings.duplicate_max_results,
        )

    async def create(self, data: TaskCreate | Mapping[str, Any], context: TaskPermissionContext) -> Task:
        """Create a task at the requester's tenant and location.

        Args:
            data: TaskCreate payload (model or mapping)
            context: Requester permission context

        Returns:
            The created task, status OPEN

        Raises:
            ValidationError: If the payload is malformed
            ConflictError: If a personal task is given assignees
            DuplicateTaskError: If a similar open task already exists
        """
        with span("task_service.create"):
            payload = _validate(TaskCreate, data)

            if payload.is_personal and payload.assignee_ids:
                raise ConflictError("Personal tasks cannot have assignees")

            duplicates = await self.check_duplicates(payload.title, payload.type, context)
            if duplicates.is_duplicate:
                log_with_user_context(
                    logger,
                    "warning",
                    "Rejected duplicate task",
                    user_id=context.user_id,
                    title=payload.title,
                    similar_task_ids=[t.id for t in duplicates.similar_tasks],
                )
                raise DuplicateTaskError("Similar task already exists", similar_tasks=duplicates.similar_tasks)

            quantity = payload.quantity
            if payload.type == TaskType.SHOPPING and quantity is None:
                quantity = Constants.DEFAULT_SHOPPING_QUANTITY

            now = self._now()
            task = Task(
                id=new_id(),
                tenant_id=context.tenant_id,
                location_id=context.location_id,
                type=payload.type,
                status=TaskStatus.OPEN,
                title=payload.title,
                description=payload.description,
                priority=payload.priority,
                quantity=quantity,
                target_location=payload.target_location,
                created_by=context.user_id,
                assignee_ids=list(payload.assignee_ids),
                is_personal=payload.is_personal,
                due_date=payload.due_date,
                created_at=now,
                updated_at=now,
            )

            created = await self._store.create_task(task)
            await self._record_history(
                task_id=created.id,
                action=HistoryAction.CREATED,
                previous_value=None,
                new_value=created.model_dump_json(),
                performed_by=context.user_id,
                performed_at=now,
            )

            log_with_context(
                logger,
                "info",
                "Created task",
                task_id=created.id,
                type=str(created.type),
                tenant_id=context.tenant_id,
                location_id=context.location_id,
            )
            return created

    async def update(
        self, task_id: str, data: TaskUpdate | Mapping[str, Any], context: TaskPermissionContext
    ) -> Task:
        """Apply a partial update.

        Only fields present in the payload are touched. Explicit None (or an empty
        string/list) clears optional fields.

        Raises:
            ValidationError: Malformed payload, clearing a required field, or
                shopping-only fields on another task type
            ConflictError: If assignees are given to a personal task
            NotFoundError / ForbiddenError: From the access-control rules
        """
        with span("task_service.update"):
            payload = _validate(TaskUpdate, data)
            changes = payload.changes()

            for name in _REQUIRED_FIELDS:
                if name in changes and changes[name] is None:
                    raise ValidationError(f"{name} cannot be cleared")

            task = await self.find_by_id(task_id, context)
            access_control.ensure_can_update(task, context)

            if task.type != TaskType.SHOPPING and any(
                changes.get(name) not in (None, "") for name in _SHOPPING_ONLY_FIELDS
            ):
                raise ValidationError("quantity and target_location are only allowed for SHOPPING tasks")

            if task.is_personal and changes.get("assignee_ids"):
                raise ConflictError("Personal tasks cannot have assignees")

            update: dict[str, Any] = {}
            for name, value in changes.items():
                if name in _CLEARABLE_TEXT_FIELDS and value == "":
                    value = None
                elif name == "assignee_ids" and value is None:
                    value = []
                update[name] = value
            update["updated_at"] = self._now()

            previous_value = task.model_dump_json()
            saved = await self._store.update_task(task.model_copy(update=update))
            await self._record_history(
                task_id=saved.id,
                action=HistoryAction.UPDATED,
                previous_value=previous_value,
                new_value=saved.model_dump_json(),
                performed_by=context.user_id,
                performed_at=update["updated_at"],
            )

            log_with_context(logger, "info", "Updated task", task_id=saved.id, fields=sorted(changes))
            return saved

    async def change_status(
        self, data: TaskStatusChange | Mapping[str, Any], context: TaskPermissionContext
    ) -> Task:
        """Move a task to another status.

        Raises:
            ConflictError: If the transition is not allowed
            NotFoundError / ForbiddenError: From the access-control rules
        """
        with span("task_service.change_status"):
            payload = _validate(TaskStatusChange, data)
            task = await self.find_by_id(payload.task_id, context)
            access_control.ensure_can_update(task, context)

            now = self._now()
            moved = task_state_machine.apply_transition(task, payload.new_status, user_id=context.user_id, now=now)
            saved = await self._store.update_task(moved)
            await self._record_history(
                task_id=saved.id,
                action=HistoryAction.STATUS_CHANGED,
                previous_value=str(task.status),
                new_value=str(saved.status),
                performed_by=context.user_id,
                performed_at=now,
            )

            logger.info("Transitioned task %s from %s to %s", saved.id, task.status, saved.status)
            return saved

    async def complete(self, task_id: str, context: TaskPermissionContext) -> Task:
        """Shortcut for moving a task to DONE."""
        return await self.change_status(TaskStatusChange(task_id=task_id, new_status=TaskStatus.DONE), context)

    async def assign(self, data: TaskAssignment | Mapping[str, Any], context: TaskPermissionContext) -> Task:
        """Replace a task's assignees.

        Notification delivery is left to the caller; ``notify_assignees`` on the
        payload and the ASSIGNED history entry tell it what changed.

        Raises:
            ConflictError: If the task is personal
            ForbiddenError: If the requester is neither creator nor manager
        """
        with span("task_service.assign"):
            payload = _validate(TaskAssignment, data)
            task = await self.find_by_id(payload.task_id, context)
            access_control.ensure_can_assign(task, context)

            saved = await self._replace_assignees(task, payload.assignee_ids, context)
            log_with_context(
                logger,
                "info",
                "Assigned task",
                task_id=saved.id,
                assignee_ids=saved.assignee_ids,
                notify_assignees=payload.notify_assignees,
            )
            return saved

    async def unassign(self, data: TaskUnassignment | Mapping[str, Any], context: TaskPermissionContext) -> Task:
        """Remove some users from a task's assignees, keeping the rest in order.

        Same permission rules as ``assign``.
        """
        with span("task_service.unassign"):
            payload = _validate(TaskUnassignment, data)
            task = await self.find_by_id(payload.task_id, context)
            access_control.ensure_can_assign(task, context)

            removed = set(payload.assignee_ids)
            remaining = [user_id for user_id in task.assignee_ids if user_id not in removed]
            saved = await self._replace_assignees(task, remaining, context)
            log_with_context(logger, "info", "Unassigned task", task_id=saved.id, removed=sorted(removed))
            return saved

    async def _replace_assignees(
        self, task: Task, assignee_ids: list[str], context: TaskPermissionContext
    ) -> Task:
        now = self._now()
        saved = await self._store.update_task(
            task.model_copy(update={"assignee_ids": list(assignee_ids), "updated_at": now})
        )
        await self._record_history(
            task_id=saved.id,
            action=HistoryAction.ASSIGNED,
            previous_value=json.dumps(task.assignee_ids),
            new_value=json.dumps(saved.assignee_ids),
            performed_by=context.user_id,
            performed_at=now,
        )
        return saved

    async def find_by_id(self, task_id: str, context: TaskPermissionContext) -> Task:
        """Fetch one task the requester may see.

        Raises:
            NotFoundError: Missing, or outside the tenant/location scope
            ForbiddenError: Another user's personal task
        """
        task = await self._store.get_task(task_id)
        return access_control.ensure_visible(task, task_id, context)

    async def find_many(
        self, data: TaskFilter | Mapping[str, Any] | None, context: TaskPermissionContext
    ) -> TaskListResult:
        """List visible tasks matching the filters, newest first, one page at a time.

        Raises:
            ValidationError: Malformed filter
            ConflictError: If ``due_date_from`` is after ``due_date_to``
        """
        with span("task_service.find_many"):
            query = _validate(TaskFilter, data or {})
            if (
                query.due_date_from is not None
                and query.due_date_to is not None
                and query.due_date_from > query.due_date_to
            ):
                raise ConflictError("Invalid due date range: due_date_from is after due_date_to")

            page = query.page
            page_size = self._settings.default_page_size if query.page_size is None else query.page_size
            if page_size > self._settings.max_page_size:
                raise ValidationError(f"page_size must be at most {self._settings.max_page_size}")
            search = query.search.lower() if query.search else None

            listed = await self._listed_tasks(context, include_personal=query.include_personal)
            matched = [task for task in listed if _matches_filter(task, query, search)]
            # Reversed first so that ties keep newest-inserted first
            matched = sorted(reversed(matched), key=lambda t: t.created_at, reverse=True)

            total = len(matched)
            start = (page - 1) * page_size
            tasks = matched[start : start + page_size]

            logger.debug("Listed %d of %d task(s) for user %s", len(tasks), total, context.user_id)
            return TaskListResult(
                tasks=tasks,
                total=total,
                page=page,
                page_size=page_size,
                has_more=page * page_size < total,
            )

    async def find_shopping_list(
        self, context: TaskPermissionContext, *, status: TaskStatus | None = None
    ) -> list[Task]:
        """Shopping items at the requester's location, most urgent first, then newest."""
        with span("task_service.find_shopping_list"):
            items = [
                task
                for task in await self._listed_tasks(context, include_personal=True, task_type=TaskType.SHOPPING)
                if status is None or task.status == status
            ]
            return sorted(
                reversed(items), key=lambda t: (_PRIORITY_RANK[t.priority], t.created_at), reverse=True
            )

    async def find_assigned(
        self,
        context: TaskPermissionContext,
        *,
        status: TaskStatus | None = None,
        task_type: TaskType | None = None,
    ) -> list[Task]:
        """Tasks assigned to the requester, soonest due first (undated last), then most urgent."""
        with span("task_service.find_assigned"):
            assigned = [
                task
                for task in await self._listed_tasks(context, include_personal=False, task_type=task_type)
                if context.user_id in task.assignee_ids and (status is None or task.status == status)
            ]
            return sorted(
                assigned,
                key=lambda t: (t.due_date is None, t.due_date or _FAR_FUTURE, -_PRIORITY_RANK[t.priority]),
            )

    async def find_overdue(self, context: TaskPermissionContext) -> list[Task]:
        """Open or in-progress tasks past their due date, most overdue first."""
        with span("task_service.find_overdue"):
            now = self._now()
            overdue = [
                task
                for task in await self._listed_tasks(context, include_personal=True, statuses=_ACTIVE_STATUSES)
                if task.due_date is not None and task.due_date < now
            ]
            return sorted(overdue, key=lambda t: t.due_date or now)

    async def _listed_tasks(
        self,
        context: TaskPermissionContext,
        *,
        include_personal: bool,
        task_type: TaskType | None = None,
        statuses: frozenset[TaskStatus] | None = None,
    ) -> list[Task]:
        """Tasks that may appear in a listing for this requester, in store order."""
        candidates = await self._store.list_tasks(
            tenant_id=context.tenant_id,
            location_id=None if context.can_view_all else context.location_id,
            task_type=task_type,
            statuses=statuses,
        )
        # Store filters are advisory
        return [
            task
            for task in candidates
            if access_control.is_listed(task, context, include_personal=include_personal)
            and (task_type is None or task.type == task_type)
            and (statuses is None or task.status in statuses)
        ]

    async def get_statistics(self, context: TaskPermissionContext, *, tz: tzinfo | None = None) -> TaskStatistics:
        """Aggregate counts over every task the requester may see.

        Args:
            context: Requester permission context
            tz: Time zone defining "today" for ``completed_today`` (defaults to the clock's zone)
        """
        with span("task_service.get_statistics"):
            candidates = await self._store.list_tasks(
                tenant_id=context.tenant_id,
                location_id=None if context.can_view_all else context.location_id,
            )
            visible = (
                task
                for task in candidates
                if access_control.in_scope(task, context) and access_control.owns_personal(task, context)
            )
            return aggregate_statistics(visible, context, now=self._now(), tz=tz)

    async def delete(self, task_id: str, context: TaskPermissionContext) -> Task:
        """Soft delete: archive the task. The record and its history are kept.

        Raises:
            ForbiddenError: If the requester is neither creator nor full manager
            ConflictError: If the task is already archived
        """
        with span("task_service.delete"):
            task = await self.find_by_id(task_id, context)
            access_control.ensure_can_delete(task, context)

            now = self._now()
            archived = task_state_machine.apply_transition(
                task, TaskStatus.ARCHIVED, user_id=context.user_id, now=now
            )
            saved = await self._store.update_task(archived)
            await self._record_history(
                task_id=saved.id,
                action=HistoryAction.ARCHIVED,
                previous_value=str(task.status),
                new_value=str(saved.status),
                performed_by=context.user_id,
                performed_at=now,
            )

            log_with_user_context(logger, "info", "Archived task", user_id=context.user_id, task_id=saved.id)
            return saved

    async def get_history(self, task_id: str, context: TaskPermissionContext) -> list[TaskHistoryEntry]:
        """History of a visible task, newest first."""
        with span("task_service.get_history"):
            await self.find_by_id(task_id, context)
            entries = await self._store.list_history(task_id)
            return sorted(reversed(entries), key=lambda e: e.performed_at, reverse=True)
