"""
MCP bridge.

Exposes tools registered in this process to a remote Model Context Protocol
peer over a single WebSocket connection:

    registry = ToolRegistry()
    registry.register(MyTool())
    catalog = registry.freeze()

    dispatcher = ProtocolDispatcher(catalog)
    bridge = ConnectionManager("wss://peer/mcp", dispatcher)
    await bridge.run()
"""

from .base import BaseTool, FunctionTool, tool
from .config import Settings, get_settings
from .connection import ConnectionManager
from .dispatcher import ProtocolDispatcher
from .errors import (
    BridgeConnectionError,
    BridgeError,
    ConfigurationError,
    ToolExecutionError,
    ToolNotFoundError,
)
from .invoker import ToolInvoker
from .protocol import CallOutcome, CallToolResult, ErrorCode, ToolDescriptor
from .registry import ToolCatalog, ToolRegistry, load_tool_modules

__all__ = [
    "BaseTool",
    "FunctionTool",
    "tool",
    "Settings",
    "get_settings",
    "ConnectionManager",
    "ProtocolDispatcher",
    "BridgeError",
    "BridgeConnectionError",
    "ConfigurationError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolInvoker",
    "CallOutcome",
    "CallToolResult",
    "ErrorCode",
    "ToolDescriptor",
    "ToolCatalog",
    "ToolRegistry",
    "load_tool_modules",
]

__version__ = "1.0.0"
