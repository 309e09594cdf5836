"""Tool definitions and results for the MCP models toolkit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from mcp_models.errors import MCPError, MCPErrorPayload

if TYPE_CHECKING:
    from mcp_models_server.backends.base import Backend


class ToolParameters(BaseModel):
    """Base parameters schema for MCP tools."""

    model_config = ConfigDict(extra="ignore")


class ToolValidationError(ValueError):
    """Raised when tool arguments violate the tool's input contract."""


@dataclass(frozen=True)
class TextContent:
    """A single text content block of a tool result."""

    text: str
    type: str = "text"

    def to_dict(self) -> Dict[str, str]:
        """Serialize the block to its wire form."""
        return {"type": self.type, "text": self.text}


@dataclass
class ToolResult:
    """Result returned by tool execution.

    Attributes:
        content: Ordered content blocks produced by the tool.
        is_error: Whether the tool reported a business failure.
        error: Structured error payload for failed results.
    """

    content: List[TextContent]
    is_error: bool = False
    error: Optional[MCPErrorPayload] = None

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        """Build a successful result holding one text block."""
        return cls(content=[TextContent(text=text)])

    @classmethod
    def from_error(cls, error: MCPError) -> "ToolResult":
        """Build a tool-level error result from an :class:`MCPError`."""
        return cls(
            content=[TextContent(text=error.message)],
            is_error=True,
            error=error.to_dict(),
        )

    @property
    def text_content(self) -> str:
        """Concatenate the text of all content blocks."""
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the result to its ``tools/call`` wire form."""
        payload: Dict[str, Any] = {
            "content": [block.to_dict() for block in self.content],
            "isError": self.is_error,
        }
        if self.error is not None:
            payload["structuredContent"] = self.error
        return payload


@dataclass(frozen=True)
class ToolContext:
    """Execution context handed to tool handlers.

    Attributes:
        backend: Persistence backend the handlers operate on.
        request_id: Identifier of the JSON-RPC request being served, if any.
    """

    backend: Backend
    request_id: object | None = None


ToolHandler = Callable[[Dict[str, Any], ToolContext], ToolResult]


@dataclass(frozen=True)
class ToolDefinition:
    """Description of a tool that can be registered with the server.

    Attributes:
        name: Unique name of the tool.
        description: Human-readable description of the tool purpose.
        parameters_model: Pydantic model used to validate input parameters.
        handler: Callable that executes the tool logic.
        input_schema: JSON schema advertised to clients. Defaults to the
            schema of ``parameters_model``.
    """

    name: str
    description: str
    parameters_model: type[ToolParameters]
    handler: ToolHandler
    input_schema: Optional[Dict[str, Any]] = None

    @property
    def schema(self) -> Dict[str, Any]:
        """Return the JSON schema describing accepted parameters."""
        if self.input_schema is not None:
            return self.input_schema
        return self.parameters_model.model_json_schema()

    def validate(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and coerce incoming tool parameters.

        Only the parameters the caller supplied are returned, so handlers can
        tell an omitted optional property from an explicit ``null``.

        Args:
            parameters: Input parameters provided for the tool.

        Raises:
            ToolValidationError: If parameter validation fails.

        Returns:
            Validated parameter dictionary.
        """

        try:
            model = self.parameters_model.model_validate(parameters)
        except ValidationError as error:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in item['loc']) or 'params'}: "
                f"{item['msg']}"
                for item in error.errors()
            )
            raise ToolValidationError(
                f"Invalid parameters for tool '{self.name}': {problems}"
            ) from error
        return model.model_dump(exclude_unset=True)

    def run(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Validate parameters and execute the handler.

        Args:
            parameters: Raw parameters supplied by the caller.
            context: Execution context for the handler.

        Raises:
            ToolValidationError: If parameter validation fails.

        Returns:
            The handler's result, or an error result when the handler raised
            an :class:`MCPError`.
        """

        validated = self.validate(parameters)
        try:
            return self.handler(validated, context)
        except MCPError as error:
            return ToolResult.from_error(error)

    def metadata(self) -> Dict[str, Any]:
        """Return a discovery-friendly description of the tool."""

        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.schema,
        }
