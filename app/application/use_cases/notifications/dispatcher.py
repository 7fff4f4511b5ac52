"""Sequential, rate-limited dispatch of pending notification emails.

One batch fetches the oldest due notifications, resolves the linked task,
renders the selected template and hands the message to the email transport,
one notification at a time. Each row ends as ``sent`` or ``failed``.

There is no row locking: two batches running against the same database at
the same time can send the same notification twice. Scheduling must ensure a
single batch runs at a time.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.entities import (
    DISPATCH_STATUS_FAILED,
    DISPATCH_STATUS_SENT,
    DISPATCH_STATUS_SKIPPED_COMPLETED,
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_SENT,
    DispatchResult,
    DispatchSummary,
    EmailMessage,
    EmailTemplate,
    Notification,
)
from app.infrastructure.email import EmailService
from app.infrastructure.record_store import RecordStore
from app.infrastructure.repositories import EmailTemplateRepository, NotificationRepository
from app.utils import now_utc

from .escalation import DEFAULT_OVERDUE_AFTER, decide_escalation
from .recipients import RecipientResolver
from .rendering import render_template
from .task_context import TaskContextResolver
from .variables import build_template_variables

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50
# The provider allows 2 requests per second; 600 ms keeps one request of slack.
DEFAULT_SEND_DELAY_SECONDS = 0.6

TASK_ALREADY_COMPLETED = "task already completed"
TEMPLATE_NOT_FOUND = "template not found"
RECIPIENT_NOT_FOUND = "recipient not found"
UNKNOWN_SEND_ERROR = "Erro desconhecido"


class NotificationFetchError(RuntimeError):
    """Raised when pending notifications cannot be loaded; nothing was processed."""


@dataclass(frozen=True)
class PreparedEmail:
    """Rendered email for a notification that passed every pre-send check."""

    notification_id: str
    template_key: str | None
    effective_template_key: str | None
    message: EmailMessage
    days_overdue: int | None = None


@dataclass(frozen=True)
class _Preparation:
    email: PreparedEmail | None = None
    result: DispatchResult | None = None


@dataclass
class PreviewResult:
    """Dry-run outcome: what a batch would send, without side effects."""

    processed: int = 0
    emails: list[PreparedEmail] = field(default_factory=list)
    skipped: list[DispatchResult] = field(default_factory=list)


class NotificationDispatcher:
    """Process one batch of pending notifications."""

    def __init__(
        self,
        *,
        notifications: NotificationRepository,
        templates: EmailTemplateRepository,
        context_resolver: TaskContextResolver,
        recipient_resolver: RecipientResolver,
        email_service: EmailService,
        app_url: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        send_delay: float = DEFAULT_SEND_DELAY_SECONDS,
        overdue_after: timedelta = DEFAULT_OVERDUE_AFTER,
        clock: Callable[[], datetime] = now_utc,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.notifications = notifications
        self.templates = templates
        self.context_resolver = context_resolver
        self.recipient_resolver = recipient_resolver
        self.email_service = email_service
        self.app_url = app_url
        self.batch_size = batch_size
        self.send_delay = send_delay
        self.overdue_after = overdue_after
        self.clock = clock
        self.sleep = sleep

    def fetch_pending(self, now: datetime) -> list[Notification]:
        """Return up to ``batch_size`` pending notifications due at ``now``."""

        try:
            return list(self.notifications.list_pending(now=now, limit=self.batch_size))
        except SQLAlchemyError as exc:
            logger.error("Error fetching pending notifications: %s", exc)
            raise NotificationFetchError(str(exc)) from exc

    def process_and_send(self, *, cancel_event: threading.Event | None = None) -> DispatchSummary:
        """Send every eligible notification and return the batch statistics.

        Raises :class:`NotificationFetchError` when the batch cannot be
        loaded. Individual failures are recorded in the summary instead. When
        ``cancel_event`` is set the loop stops before the next notification and
        the partial summary is returned.
        """

        started = time.monotonic()
        logger.info("Starting automatic processing and sending of notifications")

        pending = self.fetch_pending(self.clock())
        summary = DispatchSummary()
        if not pending:
            logger.info("No pending notifications found")
            summary.processing_time_ms = _elapsed_ms(started)
            return summary

        total = len(pending)
        logger.info("Found %s pending notifications", total)

        for index, notification in enumerate(pending, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(
                    "Dispatch cancelled after %s of %s notifications", summary.processed, total
                )
                summary.cancelled = True
                break

            logger.info(
                "Processing notification %s/%s: id=%s template_key=%s",
                index,
                total,
                notification.id,
                notification.template_key,
            )
            try:
                result, attempted_send = self._dispatch_one(notification)
            except Exception as exc:
                error = str(exc) or UNKNOWN_SEND_ERROR
                logger.exception("Unexpected error processing notification %s", notification.id)
                self.notifications.update_status(
                    notification.id, NOTIFICATION_STATUS_FAILED, error_message=error
                )
                result = DispatchResult(notification.id, DISPATCH_STATUS_FAILED, error=error)
                attempted_send = False
            summary.processed += 1
            summary.details.append(result)
            if result.status == DISPATCH_STATUS_SENT:
                summary.sent += 1
            else:
                summary.failed += 1

            if attempted_send and index < total:
                logger.info("Waiting %.0fms to respect the email rate limit", self.send_delay * 1000)
                self.sleep(self.send_delay)

        summary.processing_time_ms = _elapsed_ms(started)
        logger.info(
            "Processing finished: total=%s sent=%s failed=%s success_rate=%.1f%% time=%sms",
            summary.processed,
            summary.sent,
            summary.failed,
            summary.success_rate,
            summary.processing_time_ms,
        )
        return summary

    def preview(self) -> PreviewResult:
        """Prepare the emails of the next batch without sending or writing anything."""

        now = self.clock()
        pending = self.fetch_pending(now)
        preview = PreviewResult(processed=len(pending))
        for notification in pending:
            preparation = self._prepare(notification, now)
            if preparation.email is not None:
                preview.emails.append(preparation.email)
            elif preparation.result is not None:
                preview.skipped.append(preparation.result)
        logger.info(
            "Prepared %s emails from %s pending notifications (%s skipped)",
            len(preview.emails),
            preview.processed,
            len(preview.skipped),
        )
        return preview

    def _dispatch_one(self, notification: Notification) -> tuple[DispatchResult, bool]:
        """Run the full pipeline for one notification.

        Returns the recorded result and whether the email transport was called.
        """

        preparation = self._prepare(notification, self.clock())
        if preparation.result is not None:
            self.notifications.update_status(
                notification.id,
                NOTIFICATION_STATUS_FAILED,
                error_message=preparation.result.error,
            )
            return preparation.result, False

        prepared = preparation.email
        try:
            logger.info("Sending email for notification %s", notification.id)
            outcome = self.email_service.send(prepared.message)
        except Exception as exc:
            error = str(exc) or UNKNOWN_SEND_ERROR
            logger.error("Exception while sending email for notification %s: %s", notification.id, error)
            self.notifications.update_status(
                notification.id, NOTIFICATION_STATUS_FAILED, error_message=error
            )
            return DispatchResult(notification.id, DISPATCH_STATUS_FAILED, error=error), True

        if outcome.success:
            self.notifications.update_status(
                notification.id, NOTIFICATION_STATUS_SENT, sent_at=self.clock()
            )
            logger.info("Email sent for notification %s (email id %s)", notification.id, outcome.id)
            return (
                DispatchResult(notification.id, DISPATCH_STATUS_SENT, email_id=outcome.id or "N/A"),
                True,
            )

        error = outcome.error or UNKNOWN_SEND_ERROR
        logger.error("Failed to send email for notification %s: %s", notification.id, error)
        self.notifications.update_status(
            notification.id, NOTIFICATION_STATUS_FAILED, error_message=error
        )
        return DispatchResult(notification.id, DISPATCH_STATUS_FAILED, error=error), True

    def _prepare(self, notification: Notification, now: datetime) -> _Preparation:
        context = self.context_resolver.resolve(notification)
        if context.is_completed:
            logger.info(
                "Notification %s skipped: task already completed (completed_at=%s)",
                notification.id,
                context.completed_at,
            )
            return _Preparation(
                result=DispatchResult(
                    notification.id,
                    DISPATCH_STATUS_SKIPPED_COMPLETED,
                    error=TASK_ALREADY_COMPLETED,
                )
            )

        template = self._load_template(notification.template_key)
        if template is None:
            return self._failed(notification, TEMPLATE_NOT_FOUND)

        decision = decide_escalation(
            notification.template_key,
            notification.scheduled_at,
            now,
            context,
            overdue_after=self.overdue_after,
        )
        if decision.template_key != notification.template_key:
            logger.info(
                "Notification %s escalated from %s to %s (%s days overdue)",
                notification.id,
                notification.template_key,
                decision.template_key,
                decision.days_overdue,
            )
            template = self._load_template(decision.template_key)
            if template is None:
                return self._failed(notification, TEMPLATE_NOT_FOUND)

        recipient = self.recipient_resolver.resolve(notification)
        if recipient is None:
            return self._failed(notification, RECIPIENT_NOT_FOUND)

        variables = build_template_variables(
            notification,
            context,
            decision,
            app_url=self.app_url,
            user_name=recipient.name,
        )
        message = EmailMessage(
            to=[recipient.email],
            subject=render_template(template.subject_template, variables),
            html=render_template(template.html_template, variables),
            text=f"{notification.title}\n{notification.message}",
        )
        return _Preparation(
            email=PreparedEmail(
                notification_id=notification.id,
                template_key=notification.template_key,
                effective_template_key=template.template_key,
                message=message,
                days_overdue=decision.days_overdue,
            )
        )

    def _load_template(self, template_key: str | None) -> EmailTemplate | None:
        if not template_key:
            return None
        return self.templates.get_active_by_key(template_key)

    @staticmethod
    def _failed(notification: Notification, reason: str) -> _Preparation:
        logger.warning(
            "Notification %s cannot be sent: %s (template_key=%s)",
            notification.id,
            reason,
            notification.template_key,
        )
        return _Preparation(
            result=DispatchResult(notification.id, DISPATCH_STATUS_FAILED, error=reason)
        )


def create_notification_dispatcher(
    session: Session,
    *,
    email_service: EmailService,
    store: RecordStore | None = None,
    settings: Settings | None = None,
) -> NotificationDispatcher:
    """Wire a dispatcher to the database behind ``session`` and the given transport."""

    settings = settings or get_settings()
    store = store or RecordStore(session.get_bind())
    return NotificationDispatcher(
        notifications=NotificationRepository(session),
        templates=EmailTemplateRepository(session),
        context_resolver=TaskContextResolver(store),
        recipient_resolver=RecipientResolver(store, override=settings.notification_recipient),
        email_service=email_service,
        app_url=settings.app_url,
        batch_size=settings.notification_batch_size,
        send_delay=settings.email_send_delay_ms / 1000,
        overdue_after=timedelta(days=settings.overdue_after_days),
    )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


__all__ = [
    "NotificationDispatcher",
    "NotificationFetchError",
    "PreparedEmail",
    "PreviewResult",
    "create_notification_dispatcher",
    "RECIPIENT_NOT_FOUND",
    "TASK_ALREADY_COMPLETED",
    "TEMPLATE_NOT_FOUND",
]
