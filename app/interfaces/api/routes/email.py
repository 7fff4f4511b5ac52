"""Endpoints for transactional emails and the notification dispatch trigger."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.application.use_cases.emails import (
    send_email,
    send_password_reset_email,
    send_welcome_email,
)
from app.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationFetchError,
)
from app.config import Settings, get_settings
from app.domain.entities import EmailMessage, EmailSendResult
from app.infrastructure.email import EmailService
from app.interfaces.api.dependencies import get_email_service, get_notification_dispatcher
from app.interfaces.api.schemas import (
    DispatchResponse,
    DispatchResultRead,
    DispatchSummaryRead,
    EmailDiagnosticsRead,
    EmailSendResponse,
    PasswordResetEmailRequest,
    PreparedEmailRead,
    PreviewRead,
    PreviewResponse,
    SendEmailRequest,
    WelcomeEmailRequest,
)

router = APIRouter(prefix="/email", tags=["email"])
logger = logging.getLogger(__name__)

_FETCH_ERROR_MESSAGE = "Erro ao buscar notificações"
_NO_PENDING_MESSAGE = "Nenhuma notificação pendente"


def _send_response(result: EmailSendResult, *, success_message: str, failure_message: str):
    if result.success:
        return EmailSendResponse.from_result(result, message=success_message)
    payload = EmailSendResponse(success=False, message=failure_message, error=result.error)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=payload.model_dump(mode="json", by_alias=True),
    )


def _fetch_error_response(exc: NotificationFetchError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": _FETCH_ERROR_MESSAGE, "error": str(exc)},
    )


@router.get("/diagnostics")
def email_diagnostics(
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
) -> dict[str, Any]:
    """Describe the email configuration without exposing secrets."""

    recommendations: list[str] = []
    if not settings.sendgrid_api_key:
        recommendations.append(
            "Configure SENDGRID_API_KEY e SENDGRID_SENDER para usar o serviço real de email"
        )
        if settings.app_env == "production":
            recommendations.append(
                "⚠️ ATENÇÃO: Produção sem SENDGRID_API_KEY - emails não serão enviados!"
            )

    diagnostics = EmailDiagnosticsRead(
        environment=settings.app_env,
        has_api_key=bool(settings.sendgrid_api_key),
        sender=settings.sendgrid_sender,
        service_type=email_service.service_name,
        is_mock_service=email_service.is_mock,
        recommendations=recommendations,
    )
    logger.info("Email diagnostics requested (service %s)", email_service.service_name)
    return {
        "success": True,
        "message": "Diagnóstico de email",
        "data": diagnostics.model_dump(mode="json", by_alias=True),
    }


@router.post("/send", response_model=EmailSendResponse)
def send_email_endpoint(
    payload: SendEmailRequest,
    email_service: EmailService = Depends(get_email_service),
):
    message = EmailMessage(
        to=[str(address) for address in payload.to],
        subject=payload.subject,
        html=payload.html,
        text=payload.text,
        reply_to=str(payload.reply_to) if payload.reply_to else None,
    )
    result = send_email(email_service, message)
    return _send_response(
        result,
        success_message="Email enviado com sucesso",
        failure_message="Falha ao enviar email",
    )


@router.post("/welcome", response_model=EmailSendResponse)
def send_welcome_email_endpoint(
    payload: WelcomeEmailRequest,
    email_service: EmailService = Depends(get_email_service),
):
    result = send_welcome_email(email_service, email=str(payload.email), name=payload.name)
    return _send_response(
        result,
        success_message="Email de boas-vindas enviado com sucesso",
        failure_message="Falha ao enviar email de boas-vindas",
    )


@router.post("/password-reset", response_model=EmailSendResponse)
def send_password_reset_email_endpoint(
    payload: PasswordResetEmailRequest,
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
):
    result = send_password_reset_email(
        email_service,
        email=str(payload.email),
        reset_token=payload.reset_token,
        app_url=settings.app_url,
    )
    return _send_response(
        result,
        success_message="Email de reset de senha enviado com sucesso",
        failure_message="Falha ao enviar email de reset de senha",
    )


@router.get("/process", response_model=PreviewResponse)
def preview_pending_notifications(
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Render the next batch without sending emails or updating notifications."""

    try:
        preview = dispatcher.preview()
    except NotificationFetchError as exc:
        return _fetch_error_response(exc)

    emails = [
        PreparedEmailRead(
            notification_id=prepared.notification_id,
            template_key=prepared.template_key,
            effective_template_key=prepared.effective_template_key,
            days_overdue=prepared.days_overdue,
            to=list(prepared.message.to),
            subject=prepared.message.subject,
            html=prepared.message.html,
            text=prepared.message.text,
        )
        for prepared in preview.emails
    ]
    message = (
        f"{len(emails)} emails preparados" if preview.processed else _NO_PENDING_MESSAGE
    )
    return PreviewResponse(
        success=True,
        message=message,
        data=PreviewRead(
            processed=preview.processed,
            emails=emails,
            skipped=[DispatchResultRead.from_result(item) for item in preview.skipped],
        ),
    )


@router.api_route("/process-and-send", methods=["GET", "POST"], response_model=DispatchResponse)
def process_and_send_notifications(
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Dispatch the pending notifications and return the batch statistics.

    The response is 200 even when some notifications failed; callers should
    alert on ``data.failed``.
    """

    try:
        summary = dispatcher.process_and_send()
    except NotificationFetchError as exc:
        return _fetch_error_response(exc)

    message = "Processamento e envio concluído" if summary.processed else _NO_PENDING_MESSAGE
    return DispatchResponse(
        success=True,
        message=message,
        data=DispatchSummaryRead.from_summary(summary),
    )
