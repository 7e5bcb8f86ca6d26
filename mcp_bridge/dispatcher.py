"""JSON-RPC method routing for inbound MCP messages."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from .config import Settings
from .invoker import ToolInvoker
from .protocol import (
    NO_ID,
    ErrorCode,
    InitializeResult,
    JsonRpcErrorBody,
    JsonRpcRequest,
    JsonRpcResponse,
    ListToolsResult,
    RequestId,
    ServerInfo,
    dump_result,
)
from .registry import ToolCatalog
from ._logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_PREFIX = "notifications/"

Handler = Callable[[JsonRpcRequest], JsonRpcResponse]


class ProtocolDispatcher:
    """
    Decode -> Route -> Handle -> Encode for one inbound message at a time.

    The dispatcher holds no per-request state. Every failure short of a
    transport error is turned into a well-formed error response; only
    notifications go unanswered.
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        *,
        server_name: str = "mcp-bridge",
        server_version: str = "1.0.0",
        protocol_version: str = "2024-11-05",
        instructions: Optional[str] = None,
    ) -> None:
        self._catalog = catalog
        self._invoker = ToolInvoker(catalog)
        self._initialize_result = InitializeResult(
            protocol_version=protocol_version,
            server_info=ServerInfo(name=server_name, version=server_version),
            instructions=instructions,
        )
        self._handlers: Dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_tools_list,
            "ping": self._handle_ping,
            "tools/call": self._handle_tools_call,
        }

    @classmethod
    def from_settings(cls, catalog: ToolCatalog, settings: Settings) -> "ProtocolDispatcher":
        return cls(
            catalog,
            server_name=settings.server_name,
            server_version=settings.server_version,
            protocol_version=settings.protocol_version,
            instructions=settings.instructions,
        )

    def handle(self, raw: Union[str, bytes]) -> Optional[str]:
        """Process one wire message; return the encoded reply or None."""
        request_id: RequestId = NO_ID
        try:
            text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
            logger.info("Received MCP message", message=text)
            payload = json.loads(text)
            request_id = _recover_id(payload)
            request = JsonRpcRequest.model_validate(payload)
        except (ValueError, RecursionError) as exc:
            # ValueError covers JSONDecodeError, UnicodeDecodeError and ValidationError.
            # RecursionError is raised for pathologically nested frames.
            logger.error("Error decoding MCP message", error=_describe(exc), request_id=request_id)
            return self._encode(
                _error(request_id, f"Error processing message: {_describe(exc)}")
            )

        try:
            response = self._route(request)
        except Exception as exc:
            logger.error(
                "Error processing MCP message",
                method=request.method,
                request_id=request_id,
                exc_info=True,
            )
            response = _error(request_id, f"Error processing message: {exc}")

        if response is None:
            return None
        return self._encode(response)

    def _route(self, request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        if request.method == "notifications/initialized" or (
            request.is_notification and request.method.startswith(NOTIFICATION_PREFIX)
        ):
            logger.info("Received MCP notification", method=request.method)
            return None

        handler = self._handlers.get(request.method)
        if handler is None:
            logger.warning("Unknown MCP method", method=request.method, request_id=request.id)
            return _error(request.id, f"Method not found: {request.method}")
        return handler(request)

    def _handle_initialize(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = request.params or {}
        logger.info(
            "MCP initialize",
            client=params.get("clientInfo"),
            protocol_version=params.get("protocolVersion"),
        )
        return _result(request.id, dump_result(self._initialize_result, exclude_none=True))

    def _handle_tools_list(self, request: JsonRpcRequest) -> JsonRpcResponse:
        tools = ListToolsResult(tools=self._catalog.descriptors())
        return _result(request.id, dump_result(tools))

    def _handle_ping(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return _result(request.id, {})

    def _handle_tools_call(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = request.params or {}
        name = params.get("name")
        arguments = params.get("arguments")
        if not isinstance(name, str) or not name or not isinstance(arguments, dict):
            logger.warning("Invalid tools/call request", params=params, request_id=request.id)
            return _error(request.id, "Invalid tools/call request")

        outcome = self._invoker.invoke(name, arguments)
        if not outcome.ok:
            return _error(request.id, outcome.error or f"Error executing tool: {name}")
        return _result(request.id, dump_result(outcome.result))

    def error_reply(self, message: str, request_id: RequestId = NO_ID) -> str:
        """Encode an error response outside the normal routing path."""
        return self._encode(_error(request_id, message))

    def _encode(self, response: JsonRpcResponse) -> str:
        encoded = json.dumps(response.to_wire(), ensure_ascii=False, separators=(",", ":"))
        logger.info("Sending MCP response", message=encoded)
        return encoded


def _result(request_id: Optional[RequestId], result: Any) -> JsonRpcResponse:
    return JsonRpcResponse(id=request_id, result=result)


def _error(
    request_id: Optional[RequestId],
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
) -> JsonRpcResponse:
    return JsonRpcResponse(id=request_id, error=JsonRpcErrorBody(code=code, message=message))


def _recover_id(payload: Any) -> RequestId:
    if not isinstance(payload, dict):
        return NO_ID
    value = _integral_id(payload.get("id"))
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return NO_ID
    return value


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc']) or 'message'}: {error['msg']}"
            for error in exc.errors()
        )
    return str(exc)


def _integral_id(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
