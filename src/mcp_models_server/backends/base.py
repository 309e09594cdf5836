"""Capability interface the CRUD tools require from a persistence backend."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

Record = Mapping[str, Any]


class RecordInvalid(Exception):
    """Raised by a backend when it rejects the attributes of a record."""

    def __init__(self, message: str, errors: object | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors


@runtime_checkable
class Backend(Protocol):
    """Narrow CRUD capability set handlers depend on.

    ``model`` is the descriptor name. Records are plain mappings keyed by
    attribute name and always carry an integer ``id``.
    """

    def list(self, model: str) -> list[Record]:
        """Return every record of ``model``."""
        ...

    def find_by_id(self, model: str, record_id: int) -> Record | None:
        """Return the record with ``record_id`` or ``None``."""
        ...

    def create(self, model: str, attributes: Mapping[str, Any]) -> Record:
        """Persist a new record, raising :class:`RecordInvalid` on rejection."""
        ...

    def update(
        self, model: str, record_id: int, attributes: Mapping[str, Any]
    ) -> Record:
        """Apply ``attributes`` to an existing record and return it."""
        ...

    def delete(self, model: str, record_id: int) -> None:
        """Remove an existing record."""
        ...
