"""CRUD tool generation for exposed data models.

Given a :class:`ModelDescriptor`, :func:`generate_crud_tools` builds up to
five tools::

    list_<plural>     get_<name>     create_<name>
    update_<name>     delete_<name>

Read-only descriptors only get the list and get tools. Every tool carries an
explicit JSON schema and a pydantic model validating the same contract.
Business failures (missing records, rejected input) are raised as
:class:`MCPError` and surface as tool-level error results.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import Field, create_model

from mcp_models.errors import raise_mcp_error
from mcp_models.tools import ToolContext, ToolDefinition, ToolParameters, ToolResult
from mcp_models_server.backends.base import Backend, Record, RecordInvalid
from mcp_models_server.descriptors import ModelDescriptor, humanize
from mcp_models_server.schema import map_column_type, python_type


def _label(descriptor: ModelDescriptor) -> str:
    return descriptor.name.replace("_", " ")


def _id_property(descriptor: ModelDescriptor) -> dict[str, str]:
    return {"type": "integer", "description": f"{descriptor.display_name} ID"}


def _attribute_properties(descriptor: ModelDescriptor) -> dict[str, dict[str, str]]:
    return {
        attr: {
            "type": map_column_type(descriptor.column_type(attr)),
            "description": humanize(attr),
        }
        for attr in descriptor.writable
    }


def _object_schema(
    properties: dict[str, dict[str, str]], required: list[str]
) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


def _annotation(descriptor: ModelDescriptor, attr: str) -> Any:
    if descriptor.column_type(attr) is None:
        return Any
    return python_type(map_column_type(descriptor.column_type(attr)))


def _parameters_model(
    descriptor: ModelDescriptor, operation: str, fields: dict[str, Any]
) -> type[ToolParameters]:
    return create_model(  # type: ignore[call-overload]
        f"{descriptor.display_name}{operation}Params",
        __base__=ToolParameters,
        **fields,
    )


def _id_field(descriptor: ModelDescriptor) -> tuple[Any, Any]:
    return (int, Field(..., description=f"{descriptor.display_name} ID"))


def _project(descriptor: ModelDescriptor, record: Record) -> dict[str, Any]:
    return {attr: record.get(attr) for attr in descriptor.attributes}


def _render(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def _writable_subset(
    descriptor: ModelDescriptor, params: Mapping[str, Any]
) -> dict[str, Any]:
    return {attr: params[attr] for attr in descriptor.writable if attr in params}


def _find_or_fail(
    backend: Backend, descriptor: ModelDescriptor, record_id: int
) -> Record:
    record = backend.find_by_id(descriptor.name, record_id)
    if record is None:
        raise_mcp_error(
            "NotFound",
            f"{descriptor.display_name} not found with ID: {record_id}",
            {"id": record_id},
        )
    return record


def list_tool(descriptor: ModelDescriptor) -> ToolDefinition:
    """Create the ``list_<plural>`` tool."""

    def handler(params: dict[str, Any], context: ToolContext) -> ToolResult:
        records = context.backend.list(descriptor.name)
        return ToolResult.text(
            _render([_project(descriptor, record) for record in records])
        )

    return ToolDefinition(
        name=f"list_{descriptor.plural_name}",
        description=f"List all {descriptor.plural_name.replace('_', ' ')}",
        parameters_model=_parameters_model(descriptor, "List", {}),
        handler=handler,
        input_schema=_object_schema({}, []),
    )


def get_tool(descriptor: ModelDescriptor) -> ToolDefinition:
    """Create the ``get_<name>`` tool."""

    def handler(params: dict[str, Any], context: ToolContext) -> ToolResult:
        record = _find_or_fail(context.backend, descriptor, params["id"])
        return ToolResult.text(_render(_project(descriptor, record)))

    return ToolDefinition(
        name=f"get_{descriptor.name}",
        description=f"Get a specific {_label(descriptor)} by ID",
        parameters_model=_parameters_model(
            descriptor, "Get", {"id": _id_field(descriptor)}
        ),
        handler=handler,
        input_schema=_object_schema({"id": _id_property(descriptor)}, ["id"]),
    )


def create_tool(descriptor: ModelDescriptor) -> ToolDefinition:
    """Create the ``create_<name>`` tool; every writable attribute is required."""

    def handler(params: dict[str, Any], context: ToolContext) -> ToolResult:
        try:
            record = context.backend.create(
                descriptor.name, _writable_subset(descriptor, params)
            )
        except RecordInvalid as exc:
            raise_mcp_error(
                "RecordInvalid",
                f"Failed to create {_label(descriptor)}: {exc.message}",
                exc.errors,
            )
        return ToolResult.text(_render(_project(descriptor, record)))

    fields = {
        attr: (_annotation(descriptor, attr), Field(..., description=humanize(attr)))
        for attr in descriptor.writable
    }
    return ToolDefinition(
        name=f"create_{descriptor.name}",
        description=f"Create a new {_label(descriptor)}",
        parameters_model=_parameters_model(descriptor, "Create", fields),
        handler=handler,
        input_schema=_object_schema(
            _attribute_properties(descriptor), list(descriptor.writable)
        ),
    )


def update_tool(descriptor: ModelDescriptor) -> ToolDefinition:
    """Create the ``update_<name>`` tool; only ``id`` is required."""

    def handler(params: dict[str, Any], context: ToolContext) -> ToolResult:
        record_id = params["id"]
        _find_or_fail(context.backend, descriptor, record_id)
        try:
            record = context.backend.update(
                descriptor.name, record_id, _writable_subset(descriptor, params)
            )
        except RecordInvalid as exc:
            raise_mcp_error(
                "RecordInvalid",
                f"Failed to update {_label(descriptor)}: {exc.message}",
                exc.errors,
            )
        return ToolResult.text(_render(_project(descriptor, record)))

    fields: dict[str, Any] = {"id": _id_field(descriptor)}
    for attr in descriptor.writable:
        fields[attr] = (
            Optional[_annotation(descriptor, attr)],
            Field(default=None, description=humanize(attr)),
        )
    properties = {"id": _id_property(descriptor), **_attribute_properties(descriptor)}
    return ToolDefinition(
        name=f"update_{descriptor.name}",
        description=f"Update an existing {_label(descriptor)}",
        parameters_model=_parameters_model(descriptor, "Update", fields),
        handler=handler,
        input_schema=_object_schema(properties, ["id"]),
    )


def delete_tool(descriptor: ModelDescriptor) -> ToolDefinition:
    """Create the ``delete_<name>`` tool."""

    def handler(params: dict[str, Any], context: ToolContext) -> ToolResult:
        record_id = params["id"]
        _find_or_fail(context.backend, descriptor, record_id)
        context.backend.delete(descriptor.name, record_id)
        return ToolResult.text(
            f"{descriptor.display_name} deleted successfully (ID: {record_id})"
        )

    return ToolDefinition(
        name=f"delete_{descriptor.name}",
        description=f"Delete a {_label(descriptor)}",
        parameters_model=_parameters_model(
            descriptor, "Delete", {"id": _id_field(descriptor)}
        ),
        handler=handler,
        input_schema=_object_schema({"id": _id_property(descriptor)}, ["id"]),
    )


def generate_crud_tools(descriptor: ModelDescriptor) -> list[ToolDefinition]:
    """Instantiate the CRUD tool definitions for one descriptor."""
    tools = [list_tool(descriptor), get_tool(descriptor)]
    if not descriptor.read_only:
        tools.extend(
            [
                create_tool(descriptor),
                update_tool(descriptor),
                delete_tool(descriptor),
            ]
        )
    return tools
