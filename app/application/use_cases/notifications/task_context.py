"""Resolve completion state and enrichment fields for a notification's task.

Tasks live in one of several tables owned by the main application and their
plant and environment details are spread over tables whose names changed as
the schema evolved. Every lookup goes through :class:`RecordStore` and a
failing candidate never stops resolution.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from app.domain.entities import EMPTY_TASK_CONTEXT, Notification, TaskContext
from app.infrastructure.record_store import (
    Record,
    RecordStore,
    RecordStoreError,
    first_non_empty,
)
from app.utils import parse_datetime

logger = logging.getLogger(__name__)

TODOS_TABLE = "todos"
USER_TASKS_TABLE = "user_tasks"
TASK_COMPLETIONS_TABLE = "task_completions"
TASK_STATUS_COMPLETED = "completed"
ENVIRONMENT_REFERENCE_COLUMN = "tenda_id"


class ProbeStatus(str, enum.Enum):
    """Tagged result of looking a name up in one candidate table."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR_IGNORED = "error_ignored"


@dataclass(frozen=True)
class NameSource:
    """Candidate table and the columns that may hold a display name, in order."""

    table: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class ProbeOutcome:
    source: NameSource
    status: ProbeStatus
    value: str | None = None
    record: Record | None = None
    error: str | None = None


PLANT_SOURCES: tuple[NameSource, ...] = (
    NameSource("user_plants", ("name",)),
    NameSource("plants", ("name",)),
    NameSource("plantas", ("strain",)),
)
ENVIRONMENT_SOURCE = NameSource("tendas", ("nome", "name", "title", "label"))


def probe_name(store: RecordStore, source: NameSource, record_id: Any) -> ProbeOutcome:
    """Look ``record_id`` up in ``source`` and extract its first non-empty name."""

    try:
        record = store.get_by_id(source.table, record_id)
    except RecordStoreError as exc:
        logger.info("Ignoring lookup error on table '%s' for id %s: %s", source.table, record_id, exc)
        return ProbeOutcome(source=source, status=ProbeStatus.ERROR_IGNORED, error=str(exc))

    value = first_non_empty(record, source.columns)
    if value is None:
        return ProbeOutcome(source=source, status=ProbeStatus.NOT_FOUND, record=record)
    return ProbeOutcome(source=source, status=ProbeStatus.FOUND, value=value, record=record)


def probe_sources(
    store: RecordStore,
    sources: Sequence[NameSource],
    record_id: Any,
) -> list[ProbeOutcome]:
    """Probe ``sources`` in order, stopping at the first one that yields a name.

    The returned list holds one outcome per table actually queried; the last
    element is the match when any source was found.
    """

    outcomes: list[ProbeOutcome] = []
    for source in sources:
        outcome = probe_name(store, source, record_id)
        outcomes.append(outcome)
        if outcome.status is ProbeStatus.FOUND:
            break
    return outcomes


class TaskContextResolver:
    """Compute a :class:`TaskContext` for a notification.

    Resolution fails open: whatever goes wrong, the notification is treated as
    linked to an open task without enrichment.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        plant_sources: Sequence[NameSource] = PLANT_SOURCES,
        environment_source: NameSource = ENVIRONMENT_SOURCE,
    ) -> None:
        self.store = store
        self.plant_sources = tuple(plant_sources)
        self.environment_source = environment_source

    def resolve(self, notification: Notification) -> TaskContext:
        table = notification.task_table
        task_id = notification.task_id
        if not table or not task_id:
            return EMPTY_TASK_CONTEXT

        try:
            if table == TODOS_TABLE:
                return self._resolve_todo(task_id)
            if table == USER_TASKS_TABLE:
                return self._resolve_user_task(task_id, notification)
        except Exception:
            logger.warning(
                "Task context resolution failed for notification %s; sending without it",
                notification.id,
                exc_info=True,
            )
            return EMPTY_TASK_CONTEXT

        logger.info("Unsupported task table '%s' for notification %s", table, notification.id)
        return EMPTY_TASK_CONTEXT

    def _resolve_todo(self, task_id: str) -> TaskContext:
        todo = self._fetch_task(TODOS_TABLE, task_id)
        if todo is None:
            return EMPTY_TASK_CONTEXT

        is_completed = _is_true(todo.get("completed")) or todo.get("status") == TASK_STATUS_COMPLETED
        return TaskContext(
            is_completed=is_completed,
            completed_at=parse_datetime(todo.get("completed_at")),
            task_title=_as_text(todo.get("title")),
            task_due_date=_as_text(todo.get("due_date")),
            task_priority=_as_text(todo.get("priority")),
        )

    def _resolve_user_task(self, task_id: str, notification: Notification) -> TaskContext:
        task = self._fetch_task(USER_TASKS_TABLE, task_id)
        if task is None:
            return EMPTY_TASK_CONTEXT

        is_completed = task.get("status") == TASK_STATUS_COMPLETED or _is_true(task.get("completed"))
        completed_at = parse_datetime(task.get("completed_at")) if is_completed else None
        if not is_completed:
            completion_time = self._first_completion(task_id)
            if completion_time is not None:
                is_completed = True
                completed_at = completion_time

        plant_name = _as_text(task.get("plant_name"))
        garden_name = None
        plant_id = task.get("plant_id")
        if plant_id is None:
            plant_id = notification.payload.get("plant_id")
        if not plant_name and plant_id not in (None, ""):
            plant_name, garden_name = self._resolve_plant(task_id, plant_id)

        return TaskContext(
            is_completed=is_completed,
            completed_at=completed_at,
            plant_name=plant_name,
            garden_name=garden_name,
            task_title=_as_text(task.get("name")),
            task_due_date=_as_text(task.get("due_date")),
            task_priority=_as_text(task.get("priority")),
            task_category=_as_text(task.get("category")),
        )

    def _fetch_task(self, table: str, task_id: str) -> Record | None:
        try:
            task = self.store.get_by_id(table, task_id)
        except RecordStoreError as exc:
            logger.warning("Could not load task %s from '%s': %s", task_id, table, exc)
            return None
        if task is None:
            logger.info("Task %s not found in '%s'", task_id, table)
        return task

    def _first_completion(self, task_id: str) -> datetime | None:
        """Return the earliest logged completion for a task kept outside its row."""

        try:
            completion = self.store.first(
                TASK_COMPLETIONS_TABLE,
                {"task_id": task_id},
                order_by="completed_at",
            )
        except RecordStoreError as exc:
            logger.info("Ignoring completion log lookup error for task %s: %s", task_id, exc)
            return None
        if not completion:
            return None
        return parse_datetime(completion.get("completed_at"))

    def _resolve_plant(self, task_id: str, plant_id: Any) -> tuple[str | None, str | None]:
        outcomes = probe_sources(self.store, self.plant_sources, plant_id)
        match = outcomes[-1] if outcomes and outcomes[-1].status is ProbeStatus.FOUND else None
        if match is None:
            logger.info(
                "plant_name not found for task %s (plant %s); tried %s",
                task_id,
                plant_id,
                [outcome.source.table for outcome in outcomes],
            )
            return None, None

        logger.info(
            "plant_name resolved via %s for task %s (plant %s): %s",
            match.source.table,
            task_id,
            plant_id,
            match.value,
        )
        environment_id = (match.record or {}).get(ENVIRONMENT_REFERENCE_COLUMN)
        if environment_id in (None, ""):
            logger.info("%s row %s has no %s", match.source.table, plant_id, ENVIRONMENT_REFERENCE_COLUMN)
            return match.value, None

        environment = probe_name(self.store, self.environment_source, environment_id)
        if environment.status is ProbeStatus.FOUND:
            logger.info(
                "garden_name resolved via %s (%s): %s",
                self.environment_source.table,
                environment_id,
                environment.value,
            )
        else:
            logger.info(
                "garden_name unavailable for %s %s (%s)",
                self.environment_source.table,
                environment_id,
                environment.status.value,
            )
        return match.value, environment.value


def _is_true(value: Any) -> bool:
    return isinstance(value, int) and value == 1


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


__all__ = [
    "ENVIRONMENT_SOURCE",
    "NameSource",
    "PLANT_SOURCES",
    "ProbeOutcome",
    "ProbeStatus",
    "TaskContextResolver",
    "probe_name",
    "probe_sources",
]
