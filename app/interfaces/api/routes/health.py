"""Liveness endpoints."""

import logging
import time

from fastapi import APIRouter, Depends

from app import __version__
from app.config import Settings, get_settings
from app.infrastructure.email import EmailService
from app.interfaces.api.dependencies import get_email_service
from app.interfaces.api.schemas import HealthRead
from app.utils import now_utc

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()


def _health_payload(settings: Settings, email_service: EmailService) -> HealthRead:
    return HealthRead(
        status="healthy",
        timestamp=now_utc(),
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        version=__version__,
        environment=settings.app_env,
        email_service=email_service.service_name,
    )


@router.get("/", response_model=HealthRead)
def root(
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
) -> HealthRead:
    return _health_payload(settings, email_service)


@router.get("/health/", response_model=HealthRead)
def health_check(
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
) -> HealthRead:
    """Report that the service is up and which email transport it uses."""

    payload = _health_payload(settings, email_service)
    logger.debug("Health check performed (uptime %.0fs)", payload.uptime)
    return payload
