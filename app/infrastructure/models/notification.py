"""SQLAlchemy model for persisted notifications."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, Index, JSON, String, Text

from app.infrastructure.database import Base
from app.utils import now_utc


def _new_notification_id() -> str:
    return str(uuid4())


class NotificationModel(Base):
    """Database representation for scheduled notifications."""

    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_status_scheduled_at", "status", "scheduled_at"),)

    id = Column(String(36), primary_key=True, default=_new_notification_id)
    user_id = Column(String(36), nullable=True, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="pending")
    template_key = Column(String(100), nullable=True)
    template_variables = Column(JSON, nullable=True, default=dict)
    payload = Column(JSON, nullable=True, default=dict)
    linked_task_id = Column(String(64), nullable=True)
    linked_task_table = Column(String(63), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)


__all__ = ["NotificationModel"]
