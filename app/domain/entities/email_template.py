"""Domain entity representing a stored email template."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class EmailTemplate:
    """Subject and HTML body with ``{{variable}}`` placeholders."""

    id: int | None
    template_key: str
    name: str
    subject_template: str
    html_template: str
    available_variables: list[str] = field(default_factory=list)
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["EmailTemplate"]
