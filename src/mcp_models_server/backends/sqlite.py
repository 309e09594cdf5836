"""SQLite backend with table reflection into model descriptors."""

from __future__ import annotations

import re
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from mcp_models_server.backends.base import Record, RecordInvalid
from mcp_models_server.descriptors import (
    TIMESTAMP_ATTRIBUTES,
    ModelDescriptor,
    singularize,
)
from mcp_models_server.schema import ColumnType

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def column_type_for(declared: str | None) -> ColumnType:
    """Map a declared SQLite column type onto a :class:`ColumnType`.

    Follows SQLite's affinity rules, refined for the common boolean, decimal
    and temporal spellings.
    """
    text = (declared or "").upper()
    if "BOOL" in text:
        return ColumnType.BOOLEAN
    if "BIGINT" in text:
        return ColumnType.BIGINT
    if "INT" in text:
        return ColumnType.INTEGER
    if "DATETIME" in text or "TIMESTAMP" in text:
        return ColumnType.DATETIME
    if "DATE" in text:
        return ColumnType.DATE
    if "TIME" in text:
        return ColumnType.TIME
    if "DECIMAL" in text or "NUMERIC" in text:
        return ColumnType.DECIMAL
    if any(marker in text for marker in ("REAL", "FLOA", "DOUB")):
        return ColumnType.FLOAT
    if "TEXT" in text or "CLOB" in text:
        return ColumnType.TEXT
    return ColumnType.STRING


def _quote(identifier: str) -> str:
    if not _IDENTIFIER.match(identifier):
        raise ValueError(f"Unsupported SQL identifier '{identifier}'")
    return f'"{identifier}"'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteBackend:
    """Backend storing each model in a SQLite table keyed by ``id``."""

    def __init__(self, database: str | sqlite3.Connection = ":memory:") -> None:
        """Open ``database`` (a path or an existing connection)."""
        if isinstance(database, sqlite3.Connection):
            self._connection = database
        else:
            self._connection = sqlite3.connect(database, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._tables: dict[str, str] = {}
        self._columns: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def table_names(self) -> list[str]:
        """User tables in the database, in name order."""
        with self._lock:
            rows = self._connection.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' "
                "AND name NOT LIKE 'sqlite_%' ORDER BY name"
            ).fetchall()
        return [row["name"] for row in rows]

    def describe(
        self,
        table: str,
        *,
        name: str | None = None,
        attributes: Iterable[str] | None = None,
        writable: Iterable[str] | None = None,
        read_only: bool = False,
    ) -> ModelDescriptor:
        """Reflect ``table`` into a descriptor and bind the model to it.

        Without explicit ``attributes`` every column except the
        ``created_at``/``updated_at`` timestamps is exposed.
        """
        with self._lock:
            info = self._connection.execute(
                f"PRAGMA table_info({_quote(table)})"
            ).fetchall()
        if not info:
            raise ValueError(f"Table '{table}' does not exist")
        column_types = {row["name"]: column_type_for(row["type"]) for row in info}
        if "id" not in column_types:
            raise ValueError(f"Table '{table}' has no 'id' column")

        if attributes is None:
            exposed = [col for col in column_types if col not in TIMESTAMP_ATTRIBUTES]
        else:
            exposed = list(attributes)
        descriptor = ModelDescriptor.build(
            name or singularize(table),
            exposed,
            writable=writable,
            column_types={attr: column_types[attr] for attr in exposed if attr in column_types},
            read_only=read_only,
            plural=table if name is None else None,
        )
        self.bind(descriptor.name, table, list(column_types))
        return descriptor

    def describe_all(self, *, read_only: Iterable[str] = ()) -> list[ModelDescriptor]:
        """Describe every user table; tables named in ``read_only`` get list/get only."""
        frozen = set(read_only)
        return [
            self.describe(table, read_only=table in frozen)
            for table in self.table_names()
        ]

    def bind(self, model: str, table: str, columns: list[str]) -> None:
        """Route operations on ``model`` to ``table``."""
        _quote(table)
        self._tables[model] = table
        self._columns[model] = columns

    def list(self, model: str) -> list[Record]:
        table = self._table(model)
        with self._lock:
            rows = self._connection.execute(
                f"SELECT * FROM {table} ORDER BY id"
            ).fetchall()
        return [dict(row) for row in rows]

    def find_by_id(self, model: str, record_id: int) -> Record | None:
        table = self._table(model)
        with self._lock:
            row = self._connection.execute(
                f"SELECT * FROM {table} WHERE id = ?", (record_id,)
            ).fetchone()
        return dict(row) if row is not None else None

    def create(self, model: str, attributes: Mapping[str, Any]) -> Record:
        table = self._table(model)
        values = self._stamped(model, attributes, created=True)
        columns = ", ".join(_quote(column) for column in values)
        placeholders = ", ".join("?" for _ in values)
        if values:
            statement = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
        else:
            statement = f"INSERT INTO {table} DEFAULT VALUES"
        with self._lock:
            try:
                cursor = self._connection.execute(statement, tuple(values.values()))
                self._connection.commit()
            except sqlite3.IntegrityError as exc:
                self._connection.rollback()
                raise RecordInvalid(f"Validation failed: {exc}") from exc
            record_id = cursor.lastrowid
        created = self.find_by_id(model, record_id)
        if created is None:
            raise RuntimeError(f"Inserted {model} {record_id} could not be read back")
        return created

    def update(
        self, model: str, record_id: int, attributes: Mapping[str, Any]
    ) -> Record:
        table = self._table(model)
        values = self._stamped(model, attributes, created=False)
        if values:
            assignments = ", ".join(f"{_quote(column)} = ?" for column in values)
            with self._lock:
                try:
                    self._connection.execute(
                        f"UPDATE {table} SET {assignments} WHERE id = ?",
                        (*values.values(), record_id),
                    )
                    self._connection.commit()
                except sqlite3.IntegrityError as exc:
                    self._connection.rollback()
                    raise RecordInvalid(f"Validation failed: {exc}") from exc
        updated = self.find_by_id(model, record_id)
        if updated is None:
            raise KeyError(f"{model} {record_id} does not exist")
        return updated

    def delete(self, model: str, record_id: int) -> None:
        table = self._table(model)
        with self._lock:
            self._connection.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            self._connection.commit()

    def _table(self, model: str) -> str:
        if model not in self._tables:
            raise KeyError(f"Model '{model}' is not bound to a table")
        return _quote(self._tables[model])

    def _stamped(
        self, model: str, attributes: Mapping[str, Any], *, created: bool
    ) -> dict[str, Any]:
        columns = self._columns.get(model, [])
        values = {key: value for key, value in attributes.items() if key in columns}
        now = _now()
        if "updated_at" in columns:
            values["updated_at"] = now
        if created and "created_at" in columns:
            values["created_at"] = now
        return values
