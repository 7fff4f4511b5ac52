"""Make the task reminder templates render the garden name."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.email_templates import (
    GARDEN_TEMPLATE_KEYS,
    add_garden_name_to_templates,
)
from app.infrastructure.database import SessionLocal


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Add garden_name to the notification email templates.",
    )
    parser.add_argument(
        "template_keys",
        nargs="*",
        default=list(GARDEN_TEMPLATE_KEYS),
        help="Templates a atualizar (padrão: task_reminder task_overdue)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    print(f"Atualizando templates: {', '.join(args.template_keys)}")

    session = SessionLocal()
    try:
        results = add_garden_name_to_templates(session, template_keys=args.template_keys)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Erro ao atualizar templates: {exc}") from exc
    finally:
        session.close()

    for result in results:
        if result.updated:
            print(f"  Template {result.template_key} atualizado com garden_name")
        else:
            print(f"  Falha ao atualizar {result.template_key}: {result.error}")

    if not all(result.updated for result in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
