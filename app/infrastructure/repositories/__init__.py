"""Repository implementations for infrastructure layer."""

from .email_template_repository import EmailTemplateRepository
from .notification_repository import NotificationRepository

__all__ = [
    "EmailTemplateRepository",
    "NotificationRepository",
]
