"""Domain entity representing a scheduled notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_STATUS_PENDING = "pending"
NOTIFICATION_STATUS_SENT = "sent"
NOTIFICATION_STATUS_FAILED = "failed"

NOTIFICATION_TYPE_TASK_REMINDER = "task_reminder"
NOTIFICATION_TYPE_TASK_OVERDUE = "task_overdue"


@dataclass
class Notification:
    """Scheduled communication addressed to a single user.

    Rows are created by whatever schedules reminders and are only moved from
    ``pending`` to ``sent`` or ``failed`` by the dispatch pipeline.
    """

    id: str | None
    user_id: str | None
    type: str
    title: str
    message: str
    status: str = NOTIFICATION_STATUS_PENDING
    template_key: str | None = None
    template_variables: dict[str, Any] = field(default_factory=dict)
    payload: dict[str, Any] = field(default_factory=dict)
    linked_task_id: str | None = None
    linked_task_table: str | None = None
    created_at: datetime | None = None
    scheduled_at: datetime | None = None
    updated_at: datetime | None = None
    sent_at: datetime | None = None
    error_message: str | None = None

    @property
    def task_table(self) -> str | None:
        return self.linked_task_table or _as_text(self.payload.get("task_table"))

    @property
    def task_id(self) -> str | None:
        return self.linked_task_id or _as_text(self.payload.get("task_id"))


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


__all__ = [
    "Notification",
    "NOTIFICATION_STATUS_PENDING",
    "NOTIFICATION_STATUS_SENT",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_TYPE_TASK_REMINDER",
    "NOTIFICATION_TYPE_TASK_OVERDUE",
]
