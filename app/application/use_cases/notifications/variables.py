"""Build the variable map used to render notification templates."""

from __future__ import annotations

from typing import Any

from app.domain.entities import Notification, TaskContext
from app.utils import format_local_date

from .escalation import EscalationDecision

DEFAULT_USER_NAME = "Usuário"
DEFAULT_TASK_PRIORITY = "médio"
DEFAULT_DUE_DATE_LABEL = "Hoje"


def build_template_variables(
    notification: Notification,
    context: TaskContext,
    decision: EscalationDecision,
    *,
    app_url: str,
    user_name: str | None = None,
) -> dict[str, str | None]:
    """Merge the task context with the values stored on the notification.

    Values resolved from the linked task win over the ones captured when the
    notification was scheduled; ``None`` entries leave their placeholders
    untouched when rendered.
    """

    stored = notification.template_variables or {}

    if context.task_due_date:
        due_date = format_local_date(context.task_due_date)
    elif notification.scheduled_at:
        due_date = format_local_date(notification.scheduled_at)
    else:
        due_date = DEFAULT_DUE_DATE_LABEL

    return {
        "user_name": _text(stored.get("user_name")) or user_name or DEFAULT_USER_NAME,
        "task_title": context.task_title or _text(stored.get("task_title")) or notification.title,
        "task_description": notification.message or None,
        "task_priority": context.task_priority
        or _text(notification.payload.get("priority"))
        or DEFAULT_TASK_PRIORITY,
        "due_date": due_date,
        "plant_name": context.plant_name or _text(stored.get("plant_name")),
        "task_category": context.task_category or _text(stored.get("task_category")),
        "garden_name": context.garden_name or _text(stored.get("garden_name")),
        "days_overdue": str(decision.days_overdue) if decision.days_overdue is not None else None,
        "app_url": app_url,
    }


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


__all__ = [
    "build_template_variables",
    "DEFAULT_DUE_DATE_LABEL",
    "DEFAULT_TASK_PRIORITY",
    "DEFAULT_USER_NAME",
]
