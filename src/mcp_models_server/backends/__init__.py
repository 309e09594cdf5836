"""Persistence backends usable by the CRUD tools."""

from mcp_models_server.backends.base import Backend, Record, RecordInvalid
from mcp_models_server.backends.memory import InMemoryBackend, validates_presence
from mcp_models_server.backends.sqlite import SQLiteBackend

__all__ = [
    "Backend",
    "InMemoryBackend",
    "Record",
    "RecordInvalid",
    "SQLiteBackend",
    "validates_presence",
]
