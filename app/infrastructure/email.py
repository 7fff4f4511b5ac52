"""Email transports for transactional and notification messages via SendGrid."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol
from uuid import uuid4

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, ReplyTo

from app.config import Settings, get_settings
from app.domain.entities import EmailMessage, EmailSendResult
from app.utils import now_utc

logger = logging.getLogger(__name__)

MOCK_SENDER = "mock@growspace.dev"


class EmailService(Protocol):
    """Capability that delivers a rendered message and reports the outcome."""

    service_name: str
    is_mock: bool

    def send(self, message: EmailMessage) -> EmailSendResult:
        ...


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Fall back to a JSON string for unrecognised payloads
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        try:
            return "; ".join(str(item) for item in parsed)
        except TypeError:
            return None

    return None


def _describe_sendgrid_failure(status_code: Any, details: str | None) -> str:
    if status_code and details:
        return f"SendGrid API request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid API request failed with status {status_code}"
    if details:
        return f"SendGrid API request failed: {details}"
    return "SendGrid API request failed"


def _extract_message_id(response: Any) -> str | None:
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    try:
        value = headers.get("X-Message-Id") or headers.get("x-message-id")
    except AttributeError:
        return None
    return str(value) if value else None


class SendGridEmailService:
    """Deliver messages through the SendGrid v3 REST API."""

    service_name = "SendGridEmailService"
    is_mock = False

    def __init__(self, api_key: str, sender: str) -> None:
        if not (api_key and sender):
            raise ValueError("SendGrid API key and sender are required")
        self.api_key = api_key
        self.sender = sender

    def send(self, message: EmailMessage) -> EmailSendResult:
        logger.info("Sending email via SendGrid to %s: %s", message.to, message.subject)

        mail = Mail(
            from_email=self.sender,
            to_emails=list(message.to),
            subject=message.subject,
            html_content=message.html,
            plain_text_content=message.text or None,
        )
        if message.reply_to:
            mail.reply_to = ReplyTo(message.reply_to)

        try:
            client = SendGridAPIClient(self.api_key)
            response = client.send(mail)
        except Exception as exc:  # python-http-client raises HTTPError subclasses
            status_code = getattr(exc, "status_code", None)
            details = _extract_sendgrid_error_details(getattr(exc, "body", None))
            error = _describe_sendgrid_failure(status_code, details or str(exc) or None)
            logger.error(error)
            return EmailSendResult.failure(error)

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            details = _extract_sendgrid_error_details(getattr(response, "body", None))
            error = _describe_sendgrid_failure(status_code, details)
            logger.error("SendGrid API responded with an error: %s", error)
            return EmailSendResult.failure(error)

        message_id = _extract_message_id(response) or str(uuid4())
        logger.info("Email sent via SendGrid with id %s", message_id)
        return EmailSendResult(
            success=True,
            id=message_id,
            sender=self.sender,
            to=list(message.to),
            subject=message.subject,
            created_at=now_utc(),
        )


class MockEmailService:
    """Log messages instead of sending them; used when SendGrid is not configured."""

    service_name = "MockEmailService"
    is_mock = True

    def __init__(self) -> None:
        self.sent_messages: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> EmailSendResult:
        logger.info("[MOCK] Simulating email to %s: %s", message.to, message.subject)
        self.sent_messages.append(message)
        return EmailSendResult(
            success=True,
            id=f"mock-{uuid4()}",
            sender=MOCK_SENDER,
            to=list(message.to),
            subject=message.subject,
            created_at=now_utc(),
        )


def build_email_service(settings: Settings | None = None) -> EmailService:
    """Return the SendGrid transport when configured, otherwise the mock transport."""

    settings = settings or get_settings()
    if settings.email_enabled:
        logger.info("Using SendGridEmailService with sender %s", settings.sendgrid_sender)
        return SendGridEmailService(settings.sendgrid_api_key, settings.sendgrid_sender)

    logger.warning(
        "SendGrid configuration incomplete; using MockEmailService (environment: %s)",
        settings.app_env,
    )
    return MockEmailService()


__all__ = [
    "EmailService",
    "MockEmailService",
    "SendGridEmailService",
    "build_email_service",
]
