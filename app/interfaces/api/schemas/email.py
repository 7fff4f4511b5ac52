"""Schemas for the email and notification dispatch endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.entities import DispatchResult, DispatchSummary, EmailSendResult


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SendEmailRequest(BaseModel):
    to: list[EmailStr] = Field(..., min_length=1, description="Destinatários do email")
    subject: str = Field(..., min_length=1, max_length=200)
    html: str = Field(..., min_length=1)
    text: str | None = None
    reply_to: EmailStr | None = Field(default=None, alias="replyTo")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class WelcomeEmailRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)


class PasswordResetEmailRequest(BaseModel):
    email: EmailStr
    reset_token: str = Field(..., min_length=1, alias="resetToken")

    model_config = ConfigDict(populate_by_name=True)


class EmailSendData(_AliasedModel):
    id: str | None = None
    sender: str | None = Field(default=None, alias="from")
    to: list[str] = Field(default_factory=list)
    subject: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")


class EmailSendResponse(BaseModel):
    success: bool
    message: str | None = None
    data: EmailSendData | None = None
    error: str | None = None

    @classmethod
    def from_result(cls, result: EmailSendResult, *, message: str) -> "EmailSendResponse":
        if not result.success:
            return cls(success=False, error=result.error)
        return cls(
            success=True,
            message=message,
            data=EmailSendData(
                id=result.id,
                sender=result.sender,
                to=list(result.to),
                subject=result.subject,
                created_at=result.created_at,
            ),
        )


class DispatchResultRead(_AliasedModel):
    notification_id: str = Field(alias="notificationId")
    status: str
    email_id: str | None = Field(default=None, alias="emailId")
    error: str | None = None

    @classmethod
    def from_result(cls, result: DispatchResult) -> "DispatchResultRead":
        return cls(
            notification_id=result.notification_id,
            status=result.status,
            email_id=result.email_id,
            error=result.error,
        )


class DispatchSummaryRead(_AliasedModel):
    """Batch statistics returned by the dispatch trigger."""

    processed: int
    sent: int
    failed: int
    success_rate: float = Field(alias="successRate")
    processing_time: int = Field(alias="processingTime")
    details: list[DispatchResultRead] = Field(default_factory=list)
    cancelled: bool = False

    @classmethod
    def from_summary(cls, summary: DispatchSummary) -> "DispatchSummaryRead":
        return cls(
            processed=summary.processed,
            sent=summary.sent,
            failed=summary.failed,
            success_rate=summary.success_rate,
            processing_time=summary.processing_time_ms,
            details=[DispatchResultRead.from_result(item) for item in summary.details],
            cancelled=summary.cancelled,
        )


class DispatchResponse(BaseModel):
    success: bool
    message: str
    data: DispatchSummaryRead


class PreparedEmailRead(_AliasedModel):
    notification_id: str = Field(alias="notificationId")
    template_key: str | None = Field(default=None, alias="templateKey")
    effective_template_key: str | None = Field(
        default=None, alias="effectiveTemplateKey"
    )
    days_overdue: int | None = Field(default=None, alias="daysOverdue")
    to: list[str]
    subject: str
    html: str
    text: str | None = None


class PreviewRead(BaseModel):
    processed: int
    emails: list[PreparedEmailRead] = Field(default_factory=list)
    skipped: list[DispatchResultRead] = Field(default_factory=list)


class PreviewResponse(BaseModel):
    success: bool
    message: str
    data: PreviewRead


class EmailDiagnosticsRead(_AliasedModel):
    environment: str
    has_api_key: bool = Field(alias="hasApiKey")
    sender: str | None = None
    service_type: str = Field(alias="serviceType")
    is_mock_service: bool = Field(alias="isMockService")
    recommendations: list[str] = Field(default_factory=list)


class HealthRead(_AliasedModel):
    status: str
    timestamp: datetime
    uptime: float
    version: str
    environment: str
    email_service: str = Field(alias="emailService")


__all__ = [
    "DispatchResponse",
    "DispatchResultRead",
    "DispatchSummaryRead",
    "EmailDiagnosticsRead",
    "EmailSendData",
    "EmailSendResponse",
    "HealthRead",
    "PasswordResetEmailRequest",
    "PreparedEmailRead",
    "PreviewRead",
    "PreviewResponse",
    "SendEmailRequest",
    "WelcomeEmailRequest",
]
