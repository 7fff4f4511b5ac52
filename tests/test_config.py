"""Tests for settings validation and date helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.domain.entities import compute_success_rate
from app.utils import format_local_date, parse_datetime


def test_defaults() -> None:
    settings = Settings(database_url="sqlite://")

    assert settings.app_timezone == "America/Sao_Paulo"
    assert settings.notification_batch_size == 50
    assert settings.email_send_delay_ms == 600
    assert settings.overdue_after_days == 5
    assert settings.email_enabled is False


def test_sendgrid_key_requires_sender() -> None:
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite://", sendgrid_api_key="SG.fake")


def test_invalid_recipient_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite://", notification_recipient="not-an-email")


@pytest.mark.parametrize(
    ("sent", "processed", "expected"),
    [(0, 0, 100.0), (3, 4, 75.0), (0, 2, 0.0), (1, 2, 50.0)],
)
def test_success_rate(sent, processed, expected) -> None:
    assert compute_success_rate(sent, processed) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-06-10T08:30:00Z", datetime(2024, 6, 10, 8, 30, tzinfo=timezone.utc)),
        ("2024-06-10T08:30:00-03:00", datetime(2024, 6, 10, 11, 30, tzinfo=timezone.utc)),
        (date(2024, 6, 10), datetime(2024, 6, 10, tzinfo=timezone.utc)),
        ("amanhã", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_datetime(value, expected) -> None:
    assert parse_datetime(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-06-10", "10/06/2024"),
        (date(2024, 6, 10), "10/06/2024"),
        (datetime(2024, 6, 10, 2, 0, tzinfo=timezone.utc), "09/06/2024"),
        ("2024-06-10T15:00:00Z", "10/06/2024"),
        ("sem data", "sem data"),
        ("2024-02-30", "2024-02-30"),
    ],
)
def test_format_local_date(value, expected) -> None:
    assert format_local_date(value) == expected
