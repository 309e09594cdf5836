"""In-memory backend for tests and demos."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable, Mapping
from typing import Any

from mcp_models_server.backends.base import Record, RecordInvalid

Validator = Callable[[Mapping[str, Any]], None]


def validates_presence(*attributes: str) -> Validator:
    """Build a validator rejecting records with blank ``attributes``."""

    def validate(record: Mapping[str, Any]) -> None:
        blank = [
            attr
            for attr in attributes
            if record.get(attr) is None or str(record.get(attr)).strip() == ""
        ]
        if blank:
            messages = ", ".join(
                f"{attr.replace('_', ' ').capitalize()} can't be blank" for attr in blank
            )
            raise RecordInvalid(f"Validation failed: {messages}", errors=blank)

    return validate


class InMemoryBackend:
    """Thread-safe dict store with sequential integer identifiers."""

    def __init__(
        self, validators: Mapping[str, list[Validator]] | None = None
    ) -> None:
        """Initialize the backend with empty tables."""
        self._tables: dict[str, dict[int, dict[str, Any]]] = {}
        self._counters: dict[str, itertools.count[int]] = {}
        self._validators: dict[str, list[Validator]] = {
            model: list(checks) for model, checks in (validators or {}).items()
        }
        self._lock = threading.Lock()

    def add_validator(self, model: str, validator: Validator) -> None:
        """Attach a validator run before every create and update of ``model``."""
        with self._lock:
            self._validators.setdefault(model, []).append(validator)

    def list(self, model: str) -> list[Record]:
        with self._lock:
            table = self._tables.get(model, {})
            return [dict(record) for record in table.values()]

    def find_by_id(self, model: str, record_id: int) -> Record | None:
        with self._lock:
            record = self._tables.get(model, {}).get(record_id)
            return dict(record) if record is not None else None

    def create(self, model: str, attributes: Mapping[str, Any]) -> Record:
        with self._lock:
            candidate = dict(attributes)
            self._validate(model, candidate)
            counter = self._counters.setdefault(model, itertools.count(1))
            record_id = next(counter)
            record = {"id": record_id, **candidate}
            self._tables.setdefault(model, {})[record_id] = record
            return dict(record)

    def update(
        self, model: str, record_id: int, attributes: Mapping[str, Any]
    ) -> Record:
        with self._lock:
            table = self._tables.get(model, {})
            if record_id not in table:
                raise KeyError(f"{model} {record_id} does not exist")
            candidate = {**table[record_id], **attributes, "id": record_id}
            self._validate(model, candidate)
            table[record_id] = candidate
            return dict(candidate)

    def delete(self, model: str, record_id: int) -> None:
        with self._lock:
            table = self._tables.get(model, {})
            if record_id not in table:
                raise KeyError(f"{model} {record_id} does not exist")
            del table[record_id]

    def _validate(self, model: str, record: Mapping[str, Any]) -> None:
        for validator in self._validators.get(model, []):
            validator(record)
