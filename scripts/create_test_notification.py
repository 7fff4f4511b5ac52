"""Create a pending reminder linked to the most recent cultivation task."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import (
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_TYPE_TASK_REMINDER,
    Notification,
)
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.infrastructure.record_store import RecordStore, RecordStoreError
from app.infrastructure.repositories import NotificationRepository
from app.utils import now_utc

USER_TASKS_TABLE = "user_tasks"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a pending task_reminder notification for the latest user task.",
    )
    parser.add_argument(
        "--order-by",
        default="created_at",
        help="Coluna usada para escolher a tarefa mais recente (padrão: created_at)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    initialize_database()

    try:
        task = RecordStore(engine).first(USER_TASKS_TABLE, order_by=args.order_by, descending=True)
    except RecordStoreError as exc:
        raise SystemExit(f"Não foi possível ler {USER_TASKS_TABLE}: {exc}") from exc
    if task is None:
        raise SystemExit(f"Nenhuma tarefa encontrada em {USER_TASKS_TABLE}")

    task_id = str(task["id"])
    task_name = task.get("name")
    notification = Notification(
        id=None,
        user_id=str(task["user_id"]) if task.get("user_id") is not None else None,
        type=NOTIFICATION_TYPE_TASK_REMINDER,
        title=task_name or "Tarefa de cultivo",
        message=task.get("description") or f"Você tem uma tarefa pendente: {task_name}",
        status=NOTIFICATION_STATUS_PENDING,
        template_key=NOTIFICATION_TYPE_TASK_REMINDER,
        template_variables={
            "user_name": "Usuário",
            "task_title": task_name,
            "task_category": task.get("category"),
        },
        payload={
            "priority": task.get("priority") or "médio",
            "task_id": task_id,
            "task_table": USER_TASKS_TABLE,
            "plant_id": task.get("plant_id"),
        },
        linked_task_id=task_id,
        linked_task_table=USER_TASKS_TABLE,
        scheduled_at=now_utc(),
    )

    session = SessionLocal()
    try:
        created = NotificationRepository(session).create(notification)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Erro ao criar a notificação: {exc}") from exc
    else:
        print(
            "Notificação criada:\n"
            f"  ID: {created.id}\n"
            f"  Tarefa: {created.linked_task_table}/{created.linked_task_id}\n"
            f"  Agendada para: {created.scheduled_at.isoformat() if created.scheduled_at else '-'}\n"
            f"  Template: {created.template_key}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
