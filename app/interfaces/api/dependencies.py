"""FastAPI dependency utilities."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    NotificationDispatcher,
    create_notification_dispatcher,
)
from app.config import Settings, get_settings
from app.infrastructure.database import get_db
from app.infrastructure.email import EmailService, build_email_service
from app.infrastructure.record_store import RecordStore


@lru_cache
def get_email_service() -> EmailService:
    """Return the process-wide email transport."""

    return build_email_service(get_settings())


@lru_cache
def _record_store_for(bind: Engine) -> RecordStore:
    # Reflected tables are cached per store, so one store per engine.
    return RecordStore(bind)


def get_notification_dispatcher(
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    """Return a dispatcher bound to the request's database session."""

    return create_notification_dispatcher(
        db,
        email_service=email_service,
        store=_record_store_for(db.get_bind()),
        settings=settings,
    )
