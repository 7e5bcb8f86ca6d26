"""Unit tests for ProtocolDispatcher."""

import json

import pytest

from mcp_bridge.dispatcher import ProtocolDispatcher
from mcp_bridge.registry import ToolRegistry


def decode(raw):
    assert raw is not None
    return json.loads(raw)


class TestWireScenarios:
    """Exact request/response pairs."""

    def test_ping(self, dispatcher):
        raw = dispatcher.handle('{"id":1,"jsonrpc":"2.0","method":"ping"}')
        assert raw == '{"jsonrpc":"2.0","id":1,"result":{}}'

    def test_unknown_tool(self, dispatcher):
        raw = dispatcher.handle(
            '{"id":2,"method":"tools/call","params":{"name":"does_not_exist","arguments":{}}}'
        )
        assert raw == (
            '{"jsonrpc":"2.0","id":2,"error":{"code":-32603,'
            '"message":"Tool not found: does_not_exist"}}'
        )

    def test_bytes_input(self, dispatcher):
        raw = dispatcher.handle(b'{"id":3,"jsonrpc":"2.0","method":"ping"}')
        assert decode(raw) == {"jsonrpc": "2.0", "id": 3, "result": {}}


class TestInitialize:
    def test_capabilities(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request("initialize", id=0, params={
            "protocolVersion": "2024-11-05",
            "capabilities": {"sampling": {}, "roots": {"listChanged": False}},
            "clientInfo": {"name": "xz-mcp-broker", "version": "0.0.1"},
        })))
        result = response["result"]
        assert response["id"] == 0
        assert result["protocolVersion"] == "2024-11-05"
        assert result["capabilities"] == {
            "experimental": {},
            "prompts": {"listChanged": False},
            "resources": {"subscribe": False, "listChanged": False},
            "tools": {"listChanged": False},
        }
        assert result["serverInfo"] == {"name": "test-bridge", "version": "0.0.1"}
        assert result["instructions"] == "Test tools"

    def test_without_instructions(self, catalog, make_request):
        dispatcher = ProtocolDispatcher(catalog)
        result = decode(dispatcher.handle(make_request("initialize", id=1)))["result"]
        assert "instructions" not in result
        assert result["serverInfo"] == {"name": "mcp-bridge", "version": "1.0.0"}


class TestToolsList:
    def test_one_entry_per_tool(self, dispatcher, catalog, make_request):
        response = decode(dispatcher.handle(make_request("tools/list", id=5)))
        tools = response["result"]["tools"]
        assert len(tools) == len(catalog)
        for entry in tools:
            assert entry["name"]
            assert isinstance(entry["inputSchema"], dict)
            assert set(entry) == {"name", "description", "inputSchema"}

    def test_idempotent(self, dispatcher, make_request):
        first = dispatcher.handle(make_request("tools/list", id=1))
        second = dispatcher.handle(make_request("tools/list", id=1))
        assert first == second

    def test_empty_registry(self, make_request):
        dispatcher = ProtocolDispatcher(ToolRegistry().freeze())
        assert decode(dispatcher.handle(make_request("tools/list", id=1)))["result"] == {"tools": []}


class TestToolsCall:
    def test_success_envelope(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request(
            "tools/call", id=3, params={"name": "echo", "arguments": {"text": "hi"}},
        )))
        assert response["id"] == 3
        assert "error" not in response
        assert response["result"] == {
            "content": [{"type": "text", "text": "hi"}],
            "isError": False,
        }

    def test_domain_failure_stays_success(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request(
            "tools/call", id=4, params={"name": "add_calendar_event", "arguments": {"title": "x"}},
        )))
        assert response["result"]["isError"] is False
        assert json.loads(response["result"]["content"][0]["text"]) == {
            "success": False,
            "error": "calendar write failed",
        }

    def test_tool_failure(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request(
            "tools/call", id=6, params={"name": "broken", "arguments": {}},
        )))
        assert "result" not in response
        assert response["error"] == {
            "code": -32603,
            "message": "Error executing tool: downstream unavailable",
        }

    def test_unknown_tool_names_tool(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request(
            "tools/call", id=7, params={"name": "geocode_v9", "arguments": {}},
        )))
        assert "result" not in response
        assert "geocode_v9" in response["error"]["message"]

    @pytest.mark.parametrize(
        "params",
        [
            None,
            {},
            {"name": "echo"},
            {"arguments": {}},
            {"name": "", "arguments": {}},
            {"name": 42, "arguments": {}},
            {"name": "echo", "arguments": "text=hi"},
        ],
    )
    def test_invalid_params(self, dispatcher, make_request, params):
        response = decode(dispatcher.handle(make_request("tools/call", id=8, params=params)))
        assert response["id"] == 8
        assert response["error"]["message"] == "Invalid tools/call request"


class TestNotifications:
    def test_initialized_has_no_reply(self, dispatcher, make_request):
        assert dispatcher.handle(make_request("notifications/initialized")) is None

    def test_other_notifications_have_no_reply(self, dispatcher, make_request):
        assert dispatcher.handle(make_request("notifications/cancelled", params={"requestId": 1})) is None

    def test_unknown_method_without_id_is_answered(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request("resources/list")))
        assert "id" not in response
        assert response["error"]["message"] == "Method not found: resources/list"


class TestErrors:
    def test_unknown_method(self, dispatcher, make_request):
        response = decode(dispatcher.handle(make_request("prompts/list", id=9)))
        assert response == {
            "jsonrpc": "2.0",
            "id": 9,
            "error": {"code": -32603, "message": "Method not found: prompts/list"},
        }

    def test_malformed_json(self, dispatcher):
        response = decode(dispatcher.handle("{not json"))
        assert response["jsonrpc"] == "2.0"
        assert "id" not in response
        assert response["error"]["code"] == -32603
        assert response["error"]["message"].startswith("Error processing message:")

    def test_missing_method_recovers_id(self, dispatcher):
        response = decode(dispatcher.handle('{"jsonrpc":"2.0","id":11}'))
        assert response["id"] == 11
        assert "method" in response["error"]["message"]

    def test_non_object_message(self, dispatcher):
        response = decode(dispatcher.handle("[1, 2, 3]"))
        assert "id" not in response
        assert "error" in response

    def test_invalid_id_is_dropped(self, dispatcher):
        response = decode(dispatcher.handle('{"jsonrpc":"2.0","id":{"x":1},"method":"ping"}'))
        assert "id" not in response
        assert response["result"] == {}

    def test_string_id_echoed(self, dispatcher):
        response = decode(dispatcher.handle('{"jsonrpc":"2.0","id":"abc","method":"ping"}'))
        assert response["id"] == "abc"

    def test_processing_continues_after_decode_error(self, dispatcher, make_request):
        dispatcher.handle('{"jsonrpc":"2.0"}')
        response = decode(dispatcher.handle(make_request("ping", id=12)))
        assert response == {"jsonrpc": "2.0", "id": 12, "result": {}}

    def test_every_response_carries_jsonrpc(self, dispatcher, make_request):
        messages = [
            make_request("ping", id=1),
            make_request("tools/list", id=2),
            make_request("initialize", id=3),
            make_request("nope", id=4),
            "garbage",
        ]
        for message in messages:
            assert decode(dispatcher.handle(message))["jsonrpc"] == "2.0"


class TestHostileFrames:
    """Frames that must be answered without stopping later processing."""

    def test_deeply_nested_frame_is_answered(self, dispatcher, make_request):
        response = decode(dispatcher.handle("[" * 100000 + "]" * 100000))
        assert "id" not in response
        assert response["error"]["code"] == -32603
        assert response["error"]["message"].startswith("Error processing message:")

        after = decode(dispatcher.handle(make_request("ping", id=2)))
        assert after == {"jsonrpc": "2.0", "id": 2, "result": {}}

    def test_integral_float_id_echoed_as_int(self, dispatcher):
        raw = dispatcher.handle('{"jsonrpc":"2.0","id":1.0,"method":"ping"}')
        assert raw == '{"jsonrpc":"2.0","id":1,"result":{}}'

    def test_integral_float_id_recovered_on_decode_error(self, dispatcher):
        response = decode(dispatcher.handle('{"jsonrpc":"2.0","id":4.0}'))
        assert response["id"] == 4

    def test_fractional_id_is_dropped(self, dispatcher):
        response = decode(dispatcher.handle('{"jsonrpc":"2.0","id":1.5,"method":"ping"}'))
        assert "id" not in response

    def test_error_reply(self, dispatcher):
        assert dispatcher.error_reply("boom") == (
            '{"jsonrpc":"2.0","error":{"code":-32603,"message":"boom"}}'
        )
