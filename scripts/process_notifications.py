"""Run one notification dispatch batch from the command line.

Exits with status 1 when the batch could not be loaded or when any
notification failed, so schedulers can alert on the exit code.
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading

from app.application.use_cases.notifications import (
    NotificationFetchError,
    create_notification_dispatcher,
)
from app.config import get_settings
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.email import build_email_service


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"valor inválido: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("o tamanho do lote deve ser maior que zero")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for the dispatch run."""

    parser = argparse.ArgumentParser(
        description="Process and send pending GrowSpace notifications.",
    )
    parser.add_argument(
        "--batch-size",
        type=positive_int,
        default=None,
        help="Número máximo de notificações por execução (padrão: NOTIFICATION_BATCH_SIZE)",
    )
    return parser.parse_args(argv)


def main() -> None:
    """Dispatch pending notifications and print the batch statistics."""

    args = parse_args()
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    if args.batch_size is not None:
        settings = settings.model_copy(update={"notification_batch_size": args.batch_size})

    cancel_event = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: cancel_event.set())
    signal.signal(signal.SIGTERM, lambda *_: cancel_event.set())

    initialize_database()

    session = SessionLocal()
    try:
        dispatcher = create_notification_dispatcher(
            session,
            email_service=build_email_service(settings),
            settings=settings,
        )
        summary = dispatcher.process_and_send(cancel_event=cancel_event)
    except NotificationFetchError as exc:
        raise SystemExit(f"Erro ao buscar notificações: {exc}") from exc
    finally:
        session.close()

    print(
        "Estatísticas:\n"
        f"  Processadas: {summary.processed}\n"
        f"  Enviadas: {summary.sent}\n"
        f"  Falhas: {summary.failed}\n"
        f"  Taxa de sucesso: {summary.success_rate:.1f}%\n"
        f"  Tempo: {summary.processing_time_ms}ms"
    )
    for detail in summary.details:
        if detail.error:
            print(f"  - {detail.notification_id}: {detail.status} ({detail.error})")
    if summary.cancelled:
        print("Execução interrompida antes do fim do lote.")

    if summary.failed > 0:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
