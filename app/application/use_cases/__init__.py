"""Aggregate application use cases."""

from .email_templates import add_garden_name_to_templates
from .emails import send_email, send_password_reset_email, send_welcome_email
from .notifications import NotificationDispatcher, create_notification_dispatcher

__all__ = [
    "NotificationDispatcher",
    "add_garden_name_to_templates",
    "create_notification_dispatcher",
    "send_email",
    "send_password_reset_email",
    "send_welcome_email",
]
