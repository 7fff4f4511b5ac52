"""Computed state about the task a notification is linked to."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskContext:
    """Completion state and enrichment fields for a linked task.

    Recomputed on every pass; never persisted.
    """

    is_completed: bool = False
    completed_at: datetime | None = None
    plant_name: str | None = None
    garden_name: str | None = None
    task_title: str | None = None
    task_due_date: str | None = None
    task_priority: str | None = None
    task_category: str | None = None


EMPTY_TASK_CONTEXT = TaskContext()


__all__ = ["TaskContext", "EMPTY_TASK_CONTEXT"]
