"""Find the address a notification email should be delivered to."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.domain.entities import Notification
from app.infrastructure.record_store import Record, RecordStore, RecordStoreError, first_non_empty

logger = logging.getLogger(__name__)

EMAIL_COLUMNS: tuple[str, ...] = ("email",)
NAME_COLUMNS: tuple[str, ...] = ("nome_preferido", "nome", "name", "full_name")


@dataclass(frozen=True)
class ProfileSource:
    table: str
    user_column: str


PROFILE_SOURCES: tuple[ProfileSource, ...] = (
    ProfileSource("user_profiles", "user_id"),
    ProfileSource("users", "id"),
)


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str | None = None


class RecipientResolver:
    """Resolve the recipient and display name of a notification's user.

    When ``override`` is configured every email goes to that address; the
    profile lookup is still used for the display name.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        override: str | None = None,
        sources: Sequence[ProfileSource] = PROFILE_SOURCES,
    ) -> None:
        self.store = store
        self.override = override
        self.sources = tuple(sources)

    def resolve(self, notification: Notification) -> Recipient | None:
        profiles = self._profiles(notification.user_id)
        name = _first_value(profiles, NAME_COLUMNS)
        if self.override:
            return Recipient(email=self.override, name=name)

        email = _first_value(profiles, EMAIL_COLUMNS)
        if email is None:
            logger.warning(
                "No email address found for user %s (notification %s)",
                notification.user_id,
                notification.id,
            )
            return None
        return Recipient(email=email, name=name)

    def _profiles(self, user_id: str | None) -> list[Record]:
        if not user_id:
            return []
        profiles: list[Record] = []
        for source in self.sources:
            try:
                record = self.store.first(source.table, {source.user_column: user_id})
            except RecordStoreError as exc:
                logger.info("Ignoring profile lookup error on '%s': %s", source.table, exc)
                continue
            if record:
                profiles.append(record)
        return profiles


def _first_value(records: Sequence[Record], columns: Sequence[str]) -> str | None:
    for record in records:
        value = first_non_empty(record, columns)
        if value:
            return value
    return None


__all__ = ["PROFILE_SOURCES", "ProfileSource", "Recipient", "RecipientResolver"]
