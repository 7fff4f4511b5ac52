"""Tests for linked task resolution against reflected tables."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.application.use_cases.notifications import (
    PLANT_SOURCES,
    ProbeStatus,
    TaskContextResolver,
    probe_sources,
)
from app.domain.entities import EMPTY_TASK_CONTEXT, Notification


def _notification(table: str | None, task_id: str | None, /, **payload) -> Notification:
    return Notification(
        id="n-1",
        user_id="user-1",
        type="task_reminder",
        title="Lembrete",
        message="Você tem uma tarefa",
        template_key="task_reminder",
        payload=payload,
        linked_task_id=task_id,
        linked_task_table=table,
    )


def test_unlinked_notification_has_empty_context(record_store) -> None:
    resolver = TaskContextResolver(record_store)

    assert resolver.resolve(_notification(None, None)) == EMPTY_TASK_CONTEXT


def test_todo_completed_flag(record_store, insert_row) -> None:
    insert_row("todos", id="t-1", title="Podar", completed=1, due_date="2024-05-01", priority="alta")

    context = TaskContextResolver(record_store).resolve(_notification("todos", "t-1"))

    assert context.is_completed
    assert context.task_title == "Podar"
    assert context.task_due_date == "2024-05-01"
    assert context.task_priority == "alta"


def test_todo_completed_status(record_store, insert_row) -> None:
    insert_row("todos", id="t-2", title="Regar", completed=0, status="completed")

    context = TaskContextResolver(record_store).resolve(_notification("todos", "t-2"))

    assert context.is_completed


def test_open_todo(record_store, insert_row) -> None:
    insert_row("todos", id="t-3", title="Adubar", completed=0, status="pending")

    context = TaskContextResolver(record_store).resolve(_notification("todos", "t-3"))

    assert not context.is_completed
    assert context.completed_at is None


def test_missing_task_row_is_treated_as_open(record_store, foreign_tables) -> None:
    context = TaskContextResolver(record_store).resolve(_notification("todos", "missing"))

    assert context == EMPTY_TASK_CONTEXT


def test_task_linked_through_payload(record_store, insert_row) -> None:
    insert_row("user_tasks", id="u-1", name="Trocar vaso", status="completed")

    notification = _notification(None, None, task_table="user_tasks", task_id="u-1")
    context = TaskContextResolver(record_store).resolve(notification)

    assert context.is_completed
    assert context.task_title == "Trocar vaso"


def test_user_task_completion_log_fallback(record_store, insert_row) -> None:
    insert_row("user_tasks", id="u-2", name="Colher", status="pending")
    insert_row("task_completions", id=1, task_id="u-2", completed_at=datetime(2024, 5, 3, 10, 0))
    insert_row("task_completions", id=2, task_id="u-2", completed_at=datetime(2024, 5, 2, 9, 30))

    context = TaskContextResolver(record_store).resolve(_notification("user_tasks", "u-2"))

    assert context.is_completed
    assert context.completed_at == datetime(2024, 5, 2, 9, 30, tzinfo=timezone.utc)


def test_user_task_enrichment_with_plant_and_environment(record_store, insert_row) -> None:
    insert_row(
        "user_tasks",
        id="u-3",
        name="Podar folhas",
        status="pending",
        due_date="2024-06-01",
        priority="alta",
        category="poda",
        plant_id="p-1",
    )
    insert_row("user_plants", id="p-1", name="Tomate Cereja", tenda_id="tenda-1")
    insert_row("tendas", id="tenda-1", nome="Tenda Norte", name="North tent")

    context = TaskContextResolver(record_store).resolve(_notification("user_tasks", "u-3"))

    assert not context.is_completed
    assert context.task_title == "Podar folhas"
    assert context.task_category == "poda"
    assert context.plant_name == "Tomate Cereja"
    assert context.garden_name == "Tenda Norte"


def test_plant_lookup_skips_missing_table_and_uses_later_source(record_store, insert_row) -> None:
    insert_row("user_tasks", id="u-4", name="Regar", status="pending", plant_id="p-2")
    insert_row("plantas", id="p-2", strain="Manjericão")

    outcomes = probe_sources(record_store, PLANT_SOURCES, "p-2")
    context = TaskContextResolver(record_store).resolve(_notification("user_tasks", "u-4"))

    assert [outcome.source.table for outcome in outcomes] == ["user_plants", "plants", "plantas"]
    assert [outcome.status for outcome in outcomes] == [
        ProbeStatus.NOT_FOUND,
        ProbeStatus.ERROR_IGNORED,
        ProbeStatus.FOUND,
    ]
    assert context.plant_name == "Manjericão"
    assert context.garden_name is None


def test_plant_id_from_payload(record_store, insert_row) -> None:
    insert_row("user_tasks", id="u-5", name="Regar", status="pending")
    insert_row("user_plants", id="p-3", name="Alecrim")

    notification = _notification("user_tasks", "u-5", plant_id="p-3")
    context = TaskContextResolver(record_store).resolve(notification)

    assert context.plant_name == "Alecrim"


def test_plant_name_on_task_row_skips_lookup(record_store, insert_row) -> None:
    insert_row("user_tasks", id="u-6", name="Regar", status="pending", plant_name="Hortelã", plant_id="p-9")
    insert_row("user_plants", id="p-9", name="Outro nome")

    context = TaskContextResolver(record_store).resolve(_notification("user_tasks", "u-6"))

    assert context.plant_name == "Hortelã"


def test_unsupported_table_is_ignored(record_store, foreign_tables) -> None:
    context = TaskContextResolver(record_store).resolve(_notification("garden_tasks", "x"))

    assert context == EMPTY_TASK_CONTEXT


class ExplodingStore:
    def get_by_id(self, *args, **kwargs):
        raise RuntimeError("connection reset")

    def first(self, *args, **kwargs):
        raise RuntimeError("connection reset")


def test_unexpected_errors_fail_open(caplog: pytest.LogCaptureFixture) -> None:
    resolver = TaskContextResolver(ExplodingStore())

    with caplog.at_level("WARNING"):
        context = resolver.resolve(_notification("user_tasks", "u-1"))

    assert context == EMPTY_TASK_CONTEXT
    assert "Task context resolution failed" in caplog.text
