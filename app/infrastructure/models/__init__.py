"""ORM models used by the application infrastructure."""

from .email_template import EmailTemplateModel
from .notification import NotificationModel

__all__ = [
    "EmailTemplateModel",
    "NotificationModel",
]
