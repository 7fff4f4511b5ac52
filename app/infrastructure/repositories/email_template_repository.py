"""Persistence layer for email templates."""

from __future__ import annotations

import logging

from sqlalchemy import true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import EmailTemplate
from app.infrastructure.models import EmailTemplateModel
from app.utils import ensure_utc, now_utc

logger = logging.getLogger(__name__)


class EmailTemplateRepository:
    """Look up and maintain :class:`EmailTemplate` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_active_by_key(self, template_key: str) -> EmailTemplate | None:
        """Return the active template for ``template_key``; inactive ones count as missing."""

        try:
            models = (
                self.session.query(EmailTemplateModel)
                .filter(EmailTemplateModel.template_key == template_key)
                .filter(EmailTemplateModel.active == true())
                .order_by(EmailTemplateModel.id.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Error loading template '%s': %s", template_key, exc)
            return None
        if not models:
            logger.warning("Template not found for key '%s'", template_key)
            return None
        if len(models) > 1:
            logger.warning(
                "Found %s active templates for key '%s'; using id %s",
                len(models),
                template_key,
                models[0].id,
            )
        return self._to_entity(models[0])

    def create(self, template: EmailTemplate) -> EmailTemplate:
        model = EmailTemplateModel()
        self._apply_entity_to_model(model, template)
        model.created_at = ensure_utc(template.created_at) or now_utc()
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, template: EmailTemplate) -> EmailTemplate:
        if template.id is None:
            raise ValueError("Template id is required for updates")
        model = self.session.get(EmailTemplateModel, template.id)
        if model is None:
            msg = f"Email template with id {template.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, template)
        model.updated_at = now_utc()
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(model: EmailTemplateModel, template: EmailTemplate) -> None:
        model.template_key = template.template_key
        model.name = template.name
        model.subject_template = template.subject_template
        model.html_template = template.html_template
        model.available_variables = list(template.available_variables or [])
        model.active = template.active

    @staticmethod
    def _to_entity(model: EmailTemplateModel) -> EmailTemplate:
        return EmailTemplate(
            id=model.id,
            template_key=model.template_key,
            name=model.name,
            subject_template=model.subject_template or "",
            html_template=model.html_template or "",
            available_variables=list(model.available_variables or []),
            active=bool(model.active),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


__all__ = ["EmailTemplateRepository"]
