"""Mapping from backend column types to JSON schema types."""

from __future__ import annotations

from enum import Enum
from typing import Any, Union


class ColumnType(str, Enum):
    """Primitive column types a backend can report."""

    INTEGER = "integer"
    BIGINT = "bigint"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    STRING = "string"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"


_JSON_TYPES: dict[ColumnType, str] = {
    ColumnType.INTEGER: "integer",
    ColumnType.BIGINT: "integer",
    ColumnType.FLOAT: "number",
    ColumnType.DECIMAL: "number",
    ColumnType.BOOLEAN: "boolean",
    ColumnType.STRING: "string",
    ColumnType.TEXT: "string",
    ColumnType.DATE: "string",
    ColumnType.DATETIME: "string",
    ColumnType.TIME: "string",
}

_PYTHON_TYPES: dict[str, Any] = {
    "integer": int,
    "number": Union[int, float],
    "boolean": bool,
    "string": str,
}


def map_column_type(column_type: ColumnType | str | None) -> str:
    """Return the JSON schema type for a backend column type.

    Unknown or missing types map to ``"string"``.
    """
    if isinstance(column_type, ColumnType):
        return _JSON_TYPES[column_type]
    if not isinstance(column_type, str):
        return "string"
    try:
        return _JSON_TYPES[ColumnType(column_type.strip().lower())]
    except ValueError:
        return "string"


def python_type(json_type: str) -> Any:
    """Annotation used to validate values of a JSON schema type."""
    return _PYTHON_TYPES.get(json_type, Any)
