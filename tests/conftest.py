"""Shared fixtures for bridge tests."""

import json
from typing import Any, Dict

import pytest

from mcp_bridge.dispatcher import ProtocolDispatcher
from mcp_bridge.registry import ToolRegistry
from tests.fake_tools import BrokenTool, CalendarWriteTool, RecordingTool, SlowTool, echo


@pytest.fixture
def recording_tool():
    return RecordingTool()


@pytest.fixture
def slow_tool():
    return SlowTool()


@pytest.fixture
def catalog(recording_tool, slow_tool):
    registry = ToolRegistry()
    registry.register_all([echo, CalendarWriteTool(), BrokenTool(), recording_tool, slow_tool])
    return registry.freeze()


@pytest.fixture
def dispatcher(catalog):
    return ProtocolDispatcher(
        catalog,
        server_name="test-bridge",
        server_version="0.0.1",
        instructions="Test tools",
    )


@pytest.fixture
def make_request():
    """Build an encoded JSON-RPC message."""

    def _make(method: str, id: Any = None, params: Any = None) -> str:
        message: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if id is not None:
            message["id"] = id
        if params is not None:
            message["params"] = params
        return json.dumps(message)

    return _make
