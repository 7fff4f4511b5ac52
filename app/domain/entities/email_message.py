"""Value objects exchanged with the outbound email transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class EmailMessage:
    """Rendered email ready to be handed to a provider."""

    to: list[str]
    subject: str
    html: str
    text: str | None = None
    reply_to: str | None = None


@dataclass(frozen=True)
class EmailSendResult:
    """Outcome reported by the email transport for a single message."""

    success: bool
    id: str | None = None
    error: str | None = None
    sender: str | None = None
    to: list[str] = field(default_factory=list)
    subject: str | None = None
    created_at: datetime | None = None

    @classmethod
    def failure(cls, error: str) -> "EmailSendResult":
        return cls(success=False, error=error)


__all__ = ["EmailMessage", "EmailSendResult"]
