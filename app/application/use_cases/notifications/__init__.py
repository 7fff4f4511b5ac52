"""Pending notification processing: context, escalation, rendering and dispatch."""

from .dispatcher import (
    RECIPIENT_NOT_FOUND,
    TASK_ALREADY_COMPLETED,
    TEMPLATE_NOT_FOUND,
    NotificationDispatcher,
    NotificationFetchError,
    PreparedEmail,
    PreviewResult,
    create_notification_dispatcher,
)
from .escalation import DEFAULT_OVERDUE_AFTER, EscalationDecision, decide_escalation
from .recipients import PROFILE_SOURCES, ProfileSource, Recipient, RecipientResolver
from .rendering import render_template
from .task_context import (
    ENVIRONMENT_SOURCE,
    PLANT_SOURCES,
    NameSource,
    ProbeOutcome,
    ProbeStatus,
    TaskContextResolver,
    probe_name,
    probe_sources,
)
from .variables import build_template_variables

__all__ = [
    "DEFAULT_OVERDUE_AFTER",
    "ENVIRONMENT_SOURCE",
    "EscalationDecision",
    "NameSource",
    "NotificationDispatcher",
    "NotificationFetchError",
    "PLANT_SOURCES",
    "PROFILE_SOURCES",
    "PreparedEmail",
    "PreviewResult",
    "ProbeOutcome",
    "ProbeStatus",
    "ProfileSource",
    "RECIPIENT_NOT_FOUND",
    "Recipient",
    "RecipientResolver",
    "TASK_ALREADY_COMPLETED",
    "TEMPLATE_NOT_FOUND",
    "TaskContextResolver",
    "build_template_variables",
    "create_notification_dispatcher",
    "decide_escalation",
    "probe_name",
    "probe_sources",
    "render_template",
]
