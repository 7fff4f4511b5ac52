"""Maintenance of the stored notification email templates."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

from sqlalchemy.orm import Session

from app.domain.entities import (
    NOTIFICATION_TYPE_TASK_OVERDUE,
    NOTIFICATION_TYPE_TASK_REMINDER,
)
from app.infrastructure.repositories import EmailTemplateRepository

logger = logging.getLogger(__name__)

GARDEN_VARIABLE = "garden_name"
GARDEN_TEMPLATE_KEYS: tuple[str, ...] = (
    NOTIFICATION_TYPE_TASK_REMINDER,
    NOTIFICATION_TYPE_TASK_OVERDUE,
)
DEFAULT_AVAILABLE_VARIABLES: tuple[str, ...] = (
    "user_name",
    "task_title",
    "task_description",
    "task_priority",
    "due_date",
    "plant_name",
    "garden_name",
    "app_url",
)

_GARDEN_BLOCK = (
    "\n{{#if garden_name}}\n"
    "<p><strong>🏡 Jardim:</strong> {{garden_name}}</p>\n"
    "{{/if}}"
)
_PLANT_LINE = re.compile(
    r"(<p><strong>[^<]*Planta:</strong>\s*\{\{plant_name\}\}</p>)",
    re.IGNORECASE,
)
_PLANT_BLOCK = re.compile(r"\{\{#if\s+plant_name\}\}(.*?)\{\{/if\}\}", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class TemplateUpdateResult:
    template_key: str
    updated: bool
    error: str | None = None


def ensure_garden_in_html(html: str | None) -> str | None:
    """Add a conditional garden line next to the plant line of ``html``.

    Templates that already mention ``garden_name`` or have no recognisable
    plant section are returned unchanged.
    """

    if not html or "{{garden_name}}" in html:
        return html

    if _PLANT_LINE.search(html):
        return _PLANT_LINE.sub(lambda match: match.group(1) + _GARDEN_BLOCK, html, count=1)

    if _PLANT_BLOCK.search(html):
        return _PLANT_BLOCK.sub(
            lambda match: "{{#if plant_name}}" + match.group(1) + _GARDEN_BLOCK + "{{/if}}",
            html,
            count=1,
        )

    return html


def ensure_garden_in_available_variables(available: Any) -> list[str]:
    """Return ``available`` as a list that includes ``garden_name``.

    JSON strings are decoded; anything that is not a list of names falls back
    to the default variable set.
    """

    if isinstance(available, str):
        try:
            available = json.loads(available)
        except json.JSONDecodeError:
            available = None

    if not isinstance(available, list):
        return list(DEFAULT_AVAILABLE_VARIABLES)

    variables = [str(item) for item in available]
    if GARDEN_VARIABLE not in variables:
        variables.append(GARDEN_VARIABLE)
    return variables


def add_garden_name_to_templates(
    session: Session,
    *,
    template_keys: Sequence[str] = GARDEN_TEMPLATE_KEYS,
) -> list[TemplateUpdateResult]:
    """Make the given templates render ``garden_name``; one result per key."""

    repository = EmailTemplateRepository(session)
    results: list[TemplateUpdateResult] = []
    for key in template_keys:
        template = repository.get_active_by_key(key)
        if template is None:
            results.append(TemplateUpdateResult(key, updated=False, error="template not found"))
            continue

        updated = replace(
            template,
            html_template=ensure_garden_in_html(template.html_template) or "",
            available_variables=ensure_garden_in_available_variables(template.available_variables),
        )
        try:
            repository.update(updated)
        except ValueError as exc:
            logger.error("Error updating template %s: %s", key, exc)
            results.append(TemplateUpdateResult(key, updated=False, error=str(exc)))
            continue

        logger.info("Template %s updated with garden_name", key)
        results.append(TemplateUpdateResult(key, updated=True))
    return results


__all__ = [
    "TemplateUpdateResult",
    "add_garden_name_to_templates",
    "ensure_garden_in_available_variables",
    "ensure_garden_in_html",
]
