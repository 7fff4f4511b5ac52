"""Decide whether an open reminder should be sent as an overdue notice."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from app.domain.entities import (
    NOTIFICATION_TYPE_TASK_OVERDUE,
    NOTIFICATION_TYPE_TASK_REMINDER,
    TaskContext,
)
from app.utils import ensure_utc, parse_datetime

DEFAULT_OVERDUE_AFTER = timedelta(days=5)
_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class EscalationDecision:
    """Template to use for a notification and the overdue age, if any."""

    template_key: str | None
    days_overdue: int | None = None

    @property
    def escalated(self) -> bool:
        return self.days_overdue is not None


def decide_escalation(
    template_key: str | None,
    scheduled_at: datetime | None,
    now: datetime,
    context: TaskContext,
    *,
    overdue_after: timedelta = DEFAULT_OVERDUE_AFTER,
) -> EscalationDecision:
    """Return the effective template for a notification.

    Reminders for tasks that are still open switch to the overdue template once
    ``overdue_after`` has elapsed since ``scheduled_at``. When the
    notification has no schedule the task due date is used as the reference.
    """

    if template_key != NOTIFICATION_TYPE_TASK_REMINDER or context.is_completed:
        return EscalationDecision(template_key=template_key)

    reference = ensure_utc(scheduled_at) or parse_datetime(context.task_due_date)
    if reference is None:
        return EscalationDecision(template_key=template_key)

    elapsed = ensure_utc(now) - reference
    if elapsed < overdue_after:
        return EscalationDecision(template_key=template_key)

    days_overdue = max(1, elapsed // _ONE_DAY)
    return EscalationDecision(
        template_key=NOTIFICATION_TYPE_TASK_OVERDUE,
        days_overdue=days_overdue,
    )


__all__ = ["EscalationDecision", "decide_escalation", "DEFAULT_OVERDUE_AFTER"]
