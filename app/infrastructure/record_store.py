"""Generic read/update access to tables this service does not own.

Task, plant, environment and profile tables belong to the main application
and their columns drift over time, so they are reflected at runtime instead of
being mapped with ORM models.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import MetaData, Table, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

logger = logging.getLogger(__name__)

_identifier_regex = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

Record = dict[str, Any]


class RecordStoreError(RuntimeError):
    """Raised when a reflected table cannot be queried."""


class UnknownTableError(RecordStoreError):
    """Raised when the requested table does not exist."""


class UnknownColumnError(RecordStoreError):
    """Raised when a filter, order or update references a missing column."""


def _ensure_identifier(name: str, *, kind: str) -> str:
    candidate = (name or "").strip()
    if not _identifier_regex.match(candidate):
        msg = f"{kind.capitalize()} '{name}' is not a valid identifier"
        raise RecordStoreError(msg)
    return candidate


class RecordStore:
    """Query, fetch and update rows of reflected tables by name."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._metadata = MetaData()
        self._tables: dict[str, Table] = {}
        self._lock = threading.Lock()

    def query(
        self,
        table_name: str,
        filters: Mapping[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        """Return rows matching every equality filter in ``filters``."""

        table = self._get_table(table_name)
        statement = select(table)
        for column_name, value in (filters or {}).items():
            column = self._get_column(table, column_name)
            statement = statement.where(column == _coerce_for_column(column, value))
        if order_by:
            column = self._get_column(table, order_by)
            statement = statement.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            statement = statement.limit(limit)

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(statement).mappings().all()
        except SQLAlchemyError as exc:
            msg = f"Query on table '{table.name}' failed: {exc}"
            raise RecordStoreError(msg) from exc
        return [dict(row) for row in rows]

    def first(
        self,
        table_name: str,
        filters: Mapping[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Record | None:
        rows = self.query(
            table_name,
            filters,
            order_by=order_by,
            descending=descending,
            limit=1,
        )
        return rows[0] if rows else None

    def get_by_id(self, table_name: str, record_id: Any, *, id_column: str = "id") -> Record | None:
        """Return the row whose ``id_column`` equals ``record_id`` or ``None``."""

        return self.first(table_name, {id_column: record_id})

    def update_by_id(
        self,
        table_name: str,
        record_id: Any,
        fields: Mapping[str, Any],
        *,
        id_column: str = "id",
    ) -> bool:
        """Update ``fields`` on a single row; return whether a row matched."""

        table = self._get_table(table_name)
        key_column = self._get_column(table, id_column)
        values = {self._get_column(table, name).name: value for name, value in fields.items()}
        statement = (
            update(table)
            .where(key_column == _coerce_for_column(key_column, record_id))
            .values(**values)
        )
        try:
            with self._engine.begin() as connection:
                result = connection.execute(statement)
        except SQLAlchemyError as exc:
            msg = f"Update on table '{table.name}' failed: {exc}"
            raise RecordStoreError(msg) from exc
        return bool(result.rowcount)

    def _get_table(self, table_name: str) -> Table:
        safe_name = _ensure_identifier(table_name, kind="table")
        table = self._tables.get(safe_name)
        if table is not None:
            return table
        # Reflection mutates the shared MetaData.
        with self._lock:
            table = self._tables.get(safe_name)
            if table is not None:
                return table
            try:
                table = Table(safe_name, self._metadata, autoload_with=self._engine)
            except NoSuchTableError as exc:
                msg = f"Table '{safe_name}' does not exist"
                raise UnknownTableError(msg) from exc
            except SQLAlchemyError as exc:
                msg = f"Could not reflect table '{safe_name}': {exc}"
                raise RecordStoreError(msg) from exc
            logger.debug("Reflected table '%s' with columns %s", safe_name, list(table.columns.keys()))
            self._tables[safe_name] = table
        return table

    @staticmethod
    def _get_column(table: Table, column_name: str):
        safe_name = _ensure_identifier(column_name, kind="column")
        try:
            return table.columns[safe_name]
        except KeyError as exc:
            msg = f"Column '{safe_name}' does not exist on table '{table.name}'"
            raise UnknownColumnError(msg) from exc


def _coerce_for_column(column, value: Any) -> Any:
    """Convert ``value`` to the column's Python type for numeric and text keys.

    Identifiers arrive as strings from JSON payloads while plant or
    environment keys may be integers in the database, and vice versa.
    """

    if value is None:
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type is int and isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if python_type is str and isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def first_non_empty(record: Mapping[str, Any] | None, columns: Sequence[str]) -> str | None:
    """Return the first truthy value among ``columns`` of ``record`` as text."""

    if not record:
        return None
    for column in columns:
        value = record.get(column)
        if value not in (None, ""):
            text = str(value).strip()
            if text:
                return text
    return None


__all__ = [
    "Record",
    "RecordStore",
    "RecordStoreError",
    "UnknownColumnError",
    "UnknownTableError",
    "first_non_empty",
]
