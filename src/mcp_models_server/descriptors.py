"""Declarative descriptions of the data models exposed as tools."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from mcp_models_server.schema import ColumnType

PROTECTED_ATTRIBUTES = ("id", "created_at", "updated_at")
TIMESTAMP_ATTRIBUTES = ("created_at", "updated_at")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def underscore(name: str) -> str:
    """Convert ``LineItem`` or ``line-item`` to ``line_item``."""
    snake = _CAMEL_BOUNDARY.sub("_", name.strip())
    return re.sub(r"[\s\-]+", "_", snake).lower()


def camelize(name: str) -> str:
    """Convert ``line_item`` to ``LineItem``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def humanize(name: str) -> str:
    """Convert ``unit_price`` to ``Unit price``."""
    text = name.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def pluralize(word: str) -> str:
    """English plural of the last word of a snake_case name."""
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """Inverse of :func:`pluralize` for the common suffixes."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if re.search(r"(s|x|z|ch|sh)es$", word):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


@dataclass(frozen=True)
class ModelDescriptor:
    """Exposure declaration for one backend entity type.

    Attributes:
        name: Snake-case singular model name, unique within a registry.
        attributes: Attribute names projected into tool output, in order.
        writable: Attributes accepted by the create and update tools.
        read_only: Only list and get tools are generated when set.
        column_types: Backend column type per attribute, where known.
        plural: Override for the pluralized name used by the list tool.
    """

    name: str
    attributes: tuple[str, ...]
    writable: tuple[str, ...]
    read_only: bool = False
    column_types: Mapping[str, ColumnType | str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    plural: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Model descriptor requires a name")
        unknown = [attr for attr in self.writable if attr not in self.attributes]
        if unknown:
            raise ValueError(
                f"Writable attributes {unknown} are not exposed by '{self.name}'"
            )
        if "id" in self.writable:
            raise ValueError("The 'id' attribute can never be writable")

    @classmethod
    def build(
        cls,
        name: str,
        attributes: Iterable[str],
        *,
        writable: Iterable[str] | None = None,
        column_types: Mapping[str, ColumnType | str] | None = None,
        read_only: bool = False,
        plural: str | None = None,
    ) -> "ModelDescriptor":
        """Create a descriptor, deriving the writable subset when omitted.

        By default every exposed attribute except ``id`` and the
        ``created_at``/``updated_at`` timestamps is writable.
        """
        exposed = tuple(attributes)
        if writable is None:
            writable_attrs = tuple(
                attr for attr in exposed if attr not in PROTECTED_ATTRIBUTES
            )
        else:
            writable_attrs = tuple(writable)
        return cls(
            name=underscore(name),
            attributes=exposed,
            writable=writable_attrs,
            read_only=read_only,
            column_types=MappingProxyType(dict(column_types or {})),
            plural=plural,
        )

    @property
    def plural_name(self) -> str:
        if self.plural:
            return self.plural
        head, _, last = self.name.rpartition("_")
        return f"{head}_{pluralize(last)}" if head else pluralize(last)

    @property
    def display_name(self) -> str:
        return camelize(self.name)

    def column_type(self, attribute: str) -> ColumnType | str | None:
        return self.column_types.get(attribute)
