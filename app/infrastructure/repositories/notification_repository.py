"""Persistence helpers for notification entities."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_SENT,
    Notification,
)
from app.infrastructure.models import NotificationModel
from app.utils import ensure_utc, now_utc

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Provide read and status-update operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_pending(self, *, now: datetime, limit: int = 50) -> Sequence[Notification]:
        """Return pending notifications due at or before ``now``, oldest first."""

        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.status == NOTIFICATION_STATUS_PENDING)
            .filter(NotificationModel.scheduled_at <= ensure_utc(now))
            .order_by(NotificationModel.scheduled_at.asc(), NotificationModel.id.asc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_status(
        self,
        notification_id: str,
        status: str,
        *,
        sent_at: datetime | None = None,
        error_message: str | None = None,
    ) -> bool:
        """Persist the terminal state of a notification.

        Errors are logged and reported through the return value; they never
        propagate, so a lost write only means the row is picked up again by
        the next pass.
        """

        now = now_utc()
        values: dict[object, object] = {
            NotificationModel.status: status,
            NotificationModel.updated_at: now,
        }
        if status == NOTIFICATION_STATUS_SENT:
            values[NotificationModel.sent_at] = ensure_utc(sent_at) or now
        if status == NOTIFICATION_STATUS_FAILED and error_message:
            values[NotificationModel.error_message] = error_message

        try:
            updated = (
                self.session.query(NotificationModel)
                .filter(NotificationModel.id == notification_id)
                .update(values, synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(
                "Error updating status of notification %s to %s: %s",
                notification_id,
                status,
                exc,
            )
            return False

        if not updated:
            logger.error(
                "Notification %s not found while updating status to %s",
                notification_id,
                status,
            )
            return False

        logger.info("Notification %s status updated to %s", notification_id, status)
        return True

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        if notification.id is not None:
            model.id = notification.id
        model.user_id = notification.user_id
        model.type = notification.type
        model.title = notification.title
        model.message = notification.message
        model.status = notification.status
        model.template_key = notification.template_key
        model.template_variables = notification.template_variables or {}
        model.payload = notification.payload or {}
        model.linked_task_id = notification.linked_task_id
        model.linked_task_table = notification.linked_task_table
        model.created_at = ensure_utc(notification.created_at) or now_utc()
        model.scheduled_at = ensure_utc(notification.scheduled_at)
        model.error_message = notification.error_message

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message or "",
            status=model.status,
            template_key=model.template_key,
            template_variables=dict(model.template_variables or {}),
            payload=dict(model.payload or {}),
            linked_task_id=model.linked_task_id,
            linked_task_table=model.linked_task_table,
            created_at=ensure_utc(model.created_at),
            scheduled_at=ensure_utc(model.scheduled_at),
            updated_at=ensure_utc(model.updated_at),
            sent_at=ensure_utc(model.sent_at),
            error_message=model.error_message,
        )


__all__ = ["NotificationRepository"]
