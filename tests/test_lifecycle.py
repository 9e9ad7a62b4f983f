"""
Tests for starting and stopping the live MCP server.

Servers bind 127.0.0.1 on an OS-assigned port and are driven over real HTTP.
"""

import socket
import threading
import time

import pytest
import requests

from conftest import RecordingSink, rpc
from napkin_bridge import GatewayConfig, GatewayServer, GatewayState, create_local_gateway
from napkin_bridge.exceptions import (
    AlreadyRunningError,
    LifecycleError,
    NotRunningError,
    ServerBindError,
)


def mcp_url(port: int) -> str:
    return f"http://127.0.0.1:{port}/mcp"


def wait_for(condition, timeout: float = 5) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


@pytest.fixture
def server(gateway_state: GatewayState):
    """Running server; stopped on teardown if the test left it running."""
    gateway = GatewayServer(gateway_state)
    gateway.start()
    yield gateway
    if gateway.status():
        gateway.stop()


# =============================================================================
# Start / Stop
# =============================================================================


class TestStartStop:
    """Tests for the lifecycle state machine."""

    def test_start_reports_bound_port(self, gateway_state: GatewayState):
        gateway = GatewayServer(gateway_state)
        assert gateway.status() is False

        port = gateway.start()
        try:
            assert port > 0
            assert gateway.port == port
            assert gateway.status() is True

            response = requests.post(mcp_url(port), json=rpc("ping", 1), timeout=5)
            assert response.json() == {"jsonrpc": "2.0", "id": 1, "result": {}}
        finally:
            gateway.stop()

        assert gateway.status() is False
        assert gateway.port is None

    def test_second_start_fails(self, server: GatewayServer):
        with pytest.raises(AlreadyRunningError) as exc_info:
            server.start()

        assert str(exc_info.value) == "API server is already running"
        assert server.status() is True

    def test_stop_when_stopped_fails(self, gateway_state: GatewayState):
        gateway = GatewayServer(gateway_state)

        with pytest.raises(NotRunningError) as exc_info:
            gateway.stop()

        assert str(exc_info.value) == "API server is not running"

    def test_listener_gone_after_stop(self, server: GatewayServer):
        port = server.port
        server.stop()

        with pytest.raises(requests.ConnectionError):
            requests.post(mcp_url(port), json=rpc("ping", 1), timeout=2)

    def test_restart(self, gateway_state: GatewayState):
        gateway = GatewayServer(gateway_state)

        gateway.start()
        gateway.stop()
        port = gateway.start()
        try:
            response = requests.post(mcp_url(port), json=rpc("tools/list", 1), timeout=5)
            assert len(response.json()["result"]["tools"]) == 24
        finally:
            gateway.stop()

    def test_bind_failure_is_reported(self, sink: RecordingSink, fast_config):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        busy_port = blocker.getsockname()[1]

        try:
            state = GatewayState(publish=sink, config=fast_config.with_overrides(port=busy_port))
            gateway = GatewayServer(state)

            with pytest.raises(ServerBindError) as exc_info:
                gateway.start()
        finally:
            blocker.close()

        assert isinstance(exc_info.value, LifecycleError)
        assert exc_info.value.port == busy_port
        assert gateway.status() is False


# =============================================================================
# Serving
# =============================================================================


class TestServing:
    """Tests for request handling on a live server."""

    def test_health(self, server: GatewayServer):
        response = requests.get(f"http://127.0.0.1:{server.port}/health", timeout=5)

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_end_to_end_with_local_editor(self, fast_config):
        shapes = {}

        def editor(tool_name, arguments):
            if tool_name == "create_shape":
                shape_id = f"shape-{len(shapes) + 1}"
                shapes[shape_id] = arguments
                return {"id": shape_id}
            if tool_name == "list_shapes":
                return [{"id": k, **v} for k, v in shapes.items()]
            raise ValueError(f"Unsupported tool: {tool_name}")

        state, channel = create_local_gateway(editor, config=fast_config.with_overrides(request_timeout=5))
        gateway = GatewayServer(state)
        port = gateway.start()
        try:
            created = requests.post(
                mcp_url(port),
                json=rpc("tools/call", 1, {"name": "create_shape", "arguments": {"type": "ellipse", "x": 1, "y": 2}}),
                timeout=10,
            ).json()
            listed = requests.post(mcp_url(port), json=rpc("tools/call", 2, {"name": "list_shapes"}), timeout=10).json()
            failed = requests.post(mcp_url(port), json=rpc("tools/call", 3, {"name": "ungroup"}), timeout=10).json()
        finally:
            gateway.stop()
            channel.close()

        assert '"shape-1"' in created["result"]["content"][0]["text"]
        assert '"ellipse"' in listed["result"]["content"][0]["text"]
        # Editor-side failures are plain results carrying an error field
        assert "isError" not in failed["result"]
        assert "Unsupported tool: ungroup" in failed["result"]["content"][0]["text"]

    def test_other_requests_served_while_tool_call_waits(self, sink: RecordingSink, fast_config):
        state = GatewayState(publish=sink, config=fast_config.with_overrides(request_timeout=5))
        gateway = GatewayServer(state)
        port = gateway.start()
        replies = []

        def call_tool():
            response = requests.post(mcp_url(port), json=rpc("tools/call", 1, {"name": "get_canvas"}), timeout=10)
            replies.append(response.json())

        caller = threading.Thread(target=call_tool)
        try:
            caller.start()
            assert wait_for(lambda: len(sink.commands) == 1)

            ping = requests.post(mcp_url(port), json=rpc("ping", 2), timeout=2)
            assert ping.json()["result"] == {}
            assert caller.is_alive()

            assert state.complete(sink.last.request_id, {"shapes": []}) is True
            caller.join(timeout=5)
        finally:
            gateway.stop()

        assert replies[0]["id"] == 1
        assert '"shapes": []' in replies[0]["result"]["content"][0]["text"]

    def test_stop_lets_in_flight_call_finish(self, server: GatewayServer, sink: RecordingSink):
        port = server.port
        replies = []

        def call_tool():
            response = requests.post(
                mcp_url(port),
                json=rpc("tools/call", 7, {"name": "get_canvas"}),
                timeout=10,
            )
            replies.append(response.json())

        caller = threading.Thread(target=call_tool)
        caller.start()
        assert wait_for(lambda: len(sink.commands) == 1)

        server.stop()
        caller.join(timeout=5)

        assert server.status() is False
        assert replies == [
            {
                "jsonrpc": "2.0",
                "id": 7,
                "result": {"isError": True, "content": [{"type": "text", "text": "Request timed out"}]},
            }
        ]

    def test_event_stream_then_stop(self, server: GatewayServer, gateway_state: GatewayState):
        with requests.get(mcp_url(server.port), stream=True, timeout=5) as response:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/event-stream")

            data_line = None
            for line in response.iter_lines(decode_unicode=True):
                if line and line.startswith("data:"):
                    data_line = line
                    break

        assert data_line == 'data: {"jsonrpc": "2.0", "method": "notifications/ready"}'

        started = time.monotonic()
        server.stop()

        assert server.status() is False
        assert time.monotonic() - started < gateway_state.config.shutdown_timeout + 1

    def test_slow_drain_keeps_server_running(self, sink: RecordingSink, fast_config, monkeypatch):
        monkeypatch.setattr(GatewayConfig, "shutdown_timeout", property(lambda self: 0.2))
        state = GatewayState(publish=sink, config=fast_config.with_overrides(request_timeout=5))
        gateway = GatewayServer(state)
        port = gateway.start()
        replies = []

        def call_tool():
            response = requests.post(mcp_url(port), json=rpc("tools/call", 1, {"name": "get_canvas"}), timeout=10)
            replies.append(response.json())

        caller = threading.Thread(target=call_tool)
        caller.start()
        assert wait_for(lambda: len(sink.commands) == 1)

        assert gateway.stop() is False
        assert gateway.status() is True
        assert gateway.port == port

        state.complete(sink.last.request_id, {"shapes": []})
        caller.join(timeout=5)

        assert wait_for(gateway.stop)
        assert gateway.status() is False
        assert '"shapes": []' in replies[0]["result"]["content"][0]["text"]
