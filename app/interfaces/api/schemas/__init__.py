from .email import (
    DispatchResponse,
    DispatchResultRead,
    DispatchSummaryRead,
    EmailDiagnosticsRead,
    EmailSendData,
    EmailSendResponse,
    HealthRead,
    PasswordResetEmailRequest,
    PreparedEmailRead,
    PreviewRead,
    PreviewResponse,
    SendEmailRequest,
    WelcomeEmailRequest,
)

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
