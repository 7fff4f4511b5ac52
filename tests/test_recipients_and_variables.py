"""Tests for recipient lookup and template variable assembly."""

from __future__ import annotations

from datetime import datetime, timezone

from app.application.use_cases.notifications import (
    EscalationDecision,
    RecipientResolver,
    build_template_variables,
)
from app.domain.entities import EMPTY_TASK_CONTEXT, Notification, TaskContext

APP_URL = "https://growspace.app"


def _notification(**overrides) -> Notification:
    values = {
        "id": "n-1",
        "user_id": "user-1",
        "type": "task_reminder",
        "title": "Regar as plantas",
        "message": "Não esqueça de regar",
        "template_key": "task_reminder",
    }
    values.update(overrides)
    return Notification(**values)


def test_recipient_from_user_profile(record_store, insert_row) -> None:
    insert_row("user_profiles", id=1, user_id="user-1", email="ana@growspace.app", nome_preferido="Ana")

    recipient = RecipientResolver(record_store).resolve(_notification())

    assert recipient is not None
    assert recipient.email == "ana@growspace.app"
    assert recipient.name == "Ana"


def test_override_recipient_keeps_profile_name(record_store, insert_row) -> None:
    insert_row("user_profiles", id=1, user_id="user-1", email="ana@growspace.app", nome="Ana Souza")

    resolver = RecipientResolver(record_store, override="ops@growspace.app")
    recipient = resolver.resolve(_notification())

    assert recipient.email == "ops@growspace.app"
    assert recipient.name == "Ana Souza"


def test_missing_profile_and_users_table_yields_no_recipient(record_store, foreign_tables) -> None:
    assert RecipientResolver(record_store).resolve(_notification()) is None


def test_override_without_user(record_store) -> None:
    recipient = RecipientResolver(record_store, override="ops@growspace.app").resolve(
        _notification(user_id=None)
    )

    assert recipient.email == "ops@growspace.app"
    assert recipient.name is None


def test_variables_prefer_task_context() -> None:
    notification = _notification(
        template_variables={"task_title": "Antigo", "plant_name": "Salsa", "user_name": "Bia"},
        payload={"priority": "baixa"},
    )
    context = TaskContext(
        task_title="Regar tomates",
        task_due_date="2024-03-05",
        task_priority="alta",
        plant_name="Tomate",
        garden_name="Tenda Norte",
        task_category="rega",
    )

    variables = build_template_variables(
        notification,
        context,
        EscalationDecision("task_overdue", days_overdue=7),
        app_url=APP_URL,
        user_name="Ana",
    )

    assert variables == {
        "user_name": "Bia",
        "task_title": "Regar tomates",
        "task_description": "Não esqueça de regar",
        "task_priority": "alta",
        "due_date": "05/03/2024",
        "plant_name": "Tomate",
        "task_category": "rega",
        "garden_name": "Tenda Norte",
        "days_overdue": "7",
        "app_url": APP_URL,
    }


def test_variables_fall_back_to_defaults() -> None:
    variables = build_template_variables(
        _notification(),
        EMPTY_TASK_CONTEXT,
        EscalationDecision("task_reminder"),
        app_url=APP_URL,
    )

    assert variables["user_name"] == "Usuário"
    assert variables["task_title"] == "Regar as plantas"
    assert variables["task_priority"] == "médio"
    assert variables["due_date"] == "Hoje"
    assert variables["plant_name"] is None
    assert variables["days_overdue"] is None


def test_due_date_from_schedule_uses_local_calendar_day() -> None:
    scheduled_at = datetime(2024, 3, 5, 2, 0, tzinfo=timezone.utc)

    variables = build_template_variables(
        _notification(scheduled_at=scheduled_at, payload={"priority": "baixa"}),
        EMPTY_TASK_CONTEXT,
        EscalationDecision("task_reminder"),
        app_url=APP_URL,
        user_name="Ana",
    )

    assert variables["due_date"] == "04/03/2024"
    assert variables["task_priority"] == "baixa"
    assert variables["user_name"] == "Ana"
