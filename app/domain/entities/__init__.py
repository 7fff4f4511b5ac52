"""Domain entities exposed by the application."""

from .dispatch import (
    DISPATCH_STATUS_FAILED,
    DISPATCH_STATUS_SENT,
    DISPATCH_STATUS_SKIPPED_COMPLETED,
    DispatchResult,
    DispatchSummary,
    compute_success_rate,
)
from .email_message import EmailMessage, EmailSendResult
from .email_template import EmailTemplate
from .notification import (
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_SENT,
    NOTIFICATION_TYPE_TASK_OVERDUE,
    NOTIFICATION_TYPE_TASK_REMINDER,
    Notification,
)
from .task_context import EMPTY_TASK_CONTEXT, TaskContext

__all__ = [
    "DispatchResult",
    "DispatchSummary",
    "compute_success_rate",
    "DISPATCH_STATUS_SENT",
    "DISPATCH_STATUS_FAILED",
    "DISPATCH_STATUS_SKIPPED_COMPLETED",
    "EmailMessage",
    "EmailSendResult",
    "EmailTemplate",
    "Notification",
    "NOTIFICATION_STATUS_PENDING",
    "NOTIFICATION_STATUS_SENT",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_TYPE_TASK_REMINDER",
    "NOTIFICATION_TYPE_TASK_OVERDUE",
    "TaskContext",
    "EMPTY_TASK_CONTEXT",
]
