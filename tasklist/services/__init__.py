from tasklist.services import (
    access_control,
    analytics_service,
    duplicate_service,
    task_state_machine,
)
from tasklist.services.task_service import TaskEngine


__all__ = [
    "TaskEngine",
    "access_control",
    "analytics_service",
    "duplicate_service",
    "task_state_machine",
]
