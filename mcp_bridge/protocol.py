"""Shared Pydantic contracts for the MCP wire protocol."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

JSONRPC_VERSION = "2.0"

# Sentinel id used when no valid id could be recovered from an inbound message.
NO_ID = -1

RequestId = Union[int, str]


class ErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class ToolDescriptor(BaseModel):
    """Public metadata describing a tool."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    description: str = Field("", description="Human readable description")
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
        description="JSON schema for the tool arguments",
    )


class JsonRpcRequest(BaseModel):
    """Decoded inbound message."""

    id: Optional[RequestId] = None
    method: str = Field(..., min_length=1)
    params: Optional[Dict[str, Any]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _invalid_id_to_sentinel(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            return NO_ID
        return value

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcErrorBody(BaseModel):
    code: int = ErrorCode.INTERNAL_ERROR
    message: str


class JsonRpcResponse(BaseModel):
    """Outbound message; exactly one of result/error is set."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[RequestId] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcErrorBody] = None

    def to_wire(self) -> Dict[str, Any]:
        """Return the wire dict with a stable key order."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.id is not None and self.id != NO_ID:
            message["id"] = self.id
        if self.error is not None:
            message["error"] = {"code": int(self.error.code), "message": self.error.message}
        else:
            message["result"] = {} if self.result is None else self.result
        return message


class PromptsCapability(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    list_changed: bool = Field(False, alias="listChanged")


class ResourcesCapability(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subscribe: bool = False
    list_changed: bool = Field(False, alias="listChanged")


class ToolsCapability(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    list_changed: bool = Field(False, alias="listChanged")


class ServerCapabilities(BaseModel):
    experimental: Dict[str, Any] = Field(default_factory=dict)
    prompts: PromptsCapability = Field(default_factory=PromptsCapability)
    resources: ResourcesCapability = Field(default_factory=ResourcesCapability)
    tools: ToolsCapability = Field(default_factory=ToolsCapability)


class ServerInfo(BaseModel):
    name: str
    version: str


class InitializeResult(BaseModel):
    """Fixed capability descriptor returned by ``initialize``."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(..., alias="protocolVersion")
    capabilities: ServerCapabilities = Field(default_factory=ServerCapabilities)
    server_info: ServerInfo = Field(..., alias="serverInfo")
    instructions: Optional[str] = None


class ListToolsResult(BaseModel):
    tools: List[ToolDescriptor]


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """MCP content envelope for a successful tool call."""

    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent]
    is_error: bool = Field(False, alias="isError")


class CallOutcome(BaseModel):
    """Result of invoking a tool: a success envelope or a failure message."""

    tool: str
    ok: bool
    result: Optional[CallToolResult] = None
    error: Optional[str] = None
    latency_ms: int = Field(0, ge=0)


def dump_result(model: BaseModel, exclude_none: bool = False) -> Dict[str, Any]:
    """Serialize a result model using its wire (camelCase) field names."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
