"""Unit tests for the SendGrid and mock email transports."""

from __future__ import annotations

import json
import types

import pytest

from app.config import Settings
from app.domain.entities import EmailMessage
from app.infrastructure import email as email_module

MESSAGE = EmailMessage(
    to=["ana@growspace.app"],
    subject="Lembrete",
    html="<p>Olá</p>",
    text="Olá",
    reply_to="suporte@growspace.app",
)


class _RecordingClient:
    """Stand-in for ``SendGridAPIClient`` returning a successful response."""

    sent: list = []

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def send(self, message):
        self.sent.append(message)
        return types.SimpleNamespace(status_code=202, body="", headers={"X-Message-Id": "sg-123"})


@pytest.fixture()
def service() -> email_module.SendGridEmailService:
    return email_module.SendGridEmailService("SG.fake", "noreply@growspace.app")


def test_send_success_uses_provider_message_id(monkeypatch: pytest.MonkeyPatch, service) -> None:
    _RecordingClient.sent = []
    monkeypatch.setattr(email_module, "SendGridAPIClient", _RecordingClient)

    result = service.send(MESSAGE)

    assert result.success is True
    assert result.id == "sg-123"
    assert result.sender == "noreply@growspace.app"
    assert result.to == ["ana@growspace.app"]
    mail = _RecordingClient.sent[0].get()
    assert mail["subject"] == "Lembrete"
    assert mail["reply_to"]["email"] == "suporte@growspace.app"


def test_send_success_without_message_id_header(monkeypatch: pytest.MonkeyPatch, service) -> None:
    class NoHeaderClient(_RecordingClient):
        def send(self, message):
            return types.SimpleNamespace(status_code=202, body="", headers={})

    monkeypatch.setattr(email_module, "SendGridAPIClient", NoHeaderClient)

    result = service.send(MESSAGE)

    assert result.success is True
    assert result.id


def test_send_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog, service) -> None:
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/for-developers/sending-email/authentication/",
                    }
                ]
            }
        ).encode()

    class FailingClient(_RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = service.send(MESSAGE)

    assert result.success is False
    assert "status 403" in result.error
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_non_success_status_is_a_failure(monkeypatch: pytest.MonkeyPatch, service) -> None:
    class RateLimitedClient(_RecordingClient):
        def send(self, message):
            body = json.dumps({"errors": [{"message": "Too many requests"}]})
            return types.SimpleNamespace(status_code=429, body=body, headers={})

    monkeypatch.setattr(email_module, "SendGridAPIClient", RateLimitedClient)

    result = service.send(MESSAGE)

    assert result.success is False
    assert result.error == "SendGrid API request failed with status 429: Too many requests"


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (None, None),
        (b"", None),
        ("plain text", "plain text"),
        ({"errors": [{"message": "bad"}, "ignored"]}, "bad"),
        ({"unexpected": True}, '{"unexpected": true}'),
        (["a", "b"], "a; b"),
    ],
)
def test_extract_sendgrid_error_details(body, expected) -> None:
    assert email_module._extract_sendgrid_error_details(body) == expected


def test_mock_service_records_messages() -> None:
    service = email_module.MockEmailService()

    result = service.send(MESSAGE)

    assert result.success is True
    assert result.id.startswith("mock-")
    assert service.sent_messages == [MESSAGE]


def test_factory_uses_mock_without_configuration(caplog) -> None:
    settings = Settings(database_url="sqlite://", sendgrid_api_key=None, sendgrid_sender=None)

    with caplog.at_level("WARNING"):
        service = email_module.build_email_service(settings)

    assert service.is_mock
    assert "MockEmailService" in caplog.text


def test_factory_uses_sendgrid_when_configured() -> None:
    settings = Settings(
        database_url="sqlite://",
        sendgrid_api_key="SG.fake",
        sendgrid_sender="noreply@growspace.app",
    )

    service = email_module.build_email_service(settings)

    assert isinstance(service, email_module.SendGridEmailService)
    assert service.sender == "noreply@growspace.app"
