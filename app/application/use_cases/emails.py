"""Use cases for transactional emails sent on behalf of the main application."""

from __future__ import annotations

import logging
from html import escape

from app.domain.entities import EmailMessage, EmailSendResult
from app.infrastructure.email import EmailService

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"
WELCOME_SUBJECT = "🌱 Bem-vindo ao GrowSpace!"
PASSWORD_RESET_SUBJECT = "🔐 Recuperação de Senha - GrowSpace"


def send_email(email_service: EmailService, message: EmailMessage) -> EmailSendResult:
    """Send ``message`` and report the outcome.

    Transport failures come back as unsuccessful results; unexpected
    exceptions are logged and turned into a generic failure so callers never
    see provider internals.
    """

    logger.info("Sending email to %s: %s", message.to, message.subject)
    try:
        result = email_service.send(message)
    except Exception:
        logger.exception("Unexpected error while sending email to %s", message.to)
        return EmailSendResult.failure(INTERNAL_ERROR_MESSAGE)

    if result.success:
        logger.info("Email sent with id %s", result.id)
    else:
        logger.error("Failed to send email: %s", result.error)
    return result


def send_welcome_email(email_service: EmailService, *, email: str, name: str) -> EmailSendResult:
    safe_name = escape(name)
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1 style="color: #22c55e;">🌱 Bem-vindo ao GrowSpace!</h1>
  <p>Olá <strong>{safe_name}</strong>,</p>
  <p>Estamos muito felizes em tê-lo conosco no GrowSpace!</p>
  <p>Com nossa plataforma, você poderá:</p>
  <ul>
    <li>Gerenciar seus cultivos de forma inteligente</li>
    <li>Acompanhar o crescimento das suas plantas</li>
    <li>Receber lembretes e dicas personalizadas</li>
    <li>Conectar-se com outros cultivadores</li>
  </ul>
  <p>Se você tiver alguma dúvida, não hesite em nos contatar.</p>
  <p>Atenciosamente,<br>Equipe GrowSpace</p>
</div>
"""
    text = "\n".join(
        [
            "Bem-vindo ao GrowSpace!",
            "",
            f"Olá {name},",
            "",
            "Estamos muito felizes em tê-lo conosco no GrowSpace!",
            "",
            "Com nossa plataforma, você poderá:",
            "- Gerenciar seus cultivos de forma inteligente",
            "- Acompanhar o crescimento das suas plantas",
            "- Receber lembretes e dicas personalizadas",
            "- Conectar-se com outros cultivadores",
            "",
            "Se você tiver alguma dúvida, não hesite em nos contatar.",
            "",
            "Atenciosamente,",
            "Equipe GrowSpace",
        ]
    )
    message = EmailMessage(to=[email], subject=WELCOME_SUBJECT, html=html, text=text)
    return send_email(email_service, message)


def build_password_reset_url(app_url: str, reset_token: str) -> str:
    return f"{app_url.rstrip('/')}/reset-password?token={reset_token}"


def send_password_reset_email(
    email_service: EmailService,
    *,
    email: str,
    reset_token: str,
    app_url: str,
) -> EmailSendResult:
    """Send the link that lets a user choose a new password."""

    reset_url = build_password_reset_url(app_url, reset_token)
    safe_url = escape(reset_url, quote=True)
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1 style="color: #22c55e;">🔐 Recuperação de Senha</h1>
  <p>Você solicitou a recuperação de senha da sua conta GrowSpace.</p>
  <p>Clique no botão abaixo para redefinir sua senha:</p>
  <a href="{safe_url}" style="display: inline-block; background-color: #22c55e; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; margin: 20px 0;">
    Redefinir Senha
  </a>
  <p>Se o botão não funcionar, copie e cole este link no seu navegador:</p>
  <p style="word-break: break-all; color: #666;">{safe_url}</p>
  <p>Este link expira em 1 hora por motivos de segurança.</p>
  <p>Se você não solicitou esta recuperação, ignore este email.</p>
  <p>Atenciosamente,<br>Equipe GrowSpace</p>
</div>
"""
    text = "\n".join(
        [
            "Recuperação de Senha - GrowSpace",
            "",
            "Você solicitou a recuperação de senha da sua conta GrowSpace.",
            "",
            "Clique no link abaixo para redefinir sua senha:",
            reset_url,
            "",
            "Este link expira em 1 hora por motivos de segurança.",
            "",
            "Se você não solicitou esta recuperação, ignore este email.",
            "",
            "Atenciosamente,",
            "Equipe GrowSpace",
        ]
    )
    message = EmailMessage(to=[email], subject=PASSWORD_RESET_SUBJECT, html=html, text=text)
    return send_email(email_service, message)


__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "build_password_reset_url",
    "send_email",
    "send_password_reset_email",
    "send_welcome_email",
]
