"""
Pytest fixtures for napkin-bridge tests.
"""

import sys
from pathlib import Path
from typing import Any, Generator

import pytest

# Add project root to path for napkin_bridge imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from napkin_bridge.bridge import ToolCommand  # noqa: E402
from napkin_bridge.configs import GatewayConfig  # noqa: E402
from napkin_bridge.state import GatewayState  # noqa: E402


class RecordingSink:
    """Command sink that records what was published and optionally answers it."""

    def __init__(self):
        self.commands: list[ToolCommand] = []
        self.responder = None  # Callable[[ToolCommand], None] | None

    def __call__(self, command: ToolCommand) -> None:
        self.commands.append(command)
        if self.responder is not None:
            self.responder(command)

    @property
    def last(self) -> ToolCommand:
        return self.commands[-1]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> Path:
    """Point the data directory at a temp dir and clear NAPKIN_* overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("NAPKIN_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("NAPKIN_DATA_PATH", str(tmp_path))
    return tmp_path


@pytest.fixture
def fast_config() -> GatewayConfig:
    """Config with an OS-assigned port and short timeouts."""
    return GatewayConfig(
        port=0,
        request_timeout=0.3,
        keepalive_interval=1,
        startup_timeout=5,
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def gateway_state(sink: RecordingSink, fast_config: GatewayConfig) -> GatewayState:
    return GatewayState(publish=sink, config=fast_config)


@pytest.fixture
def echo_state(sink: RecordingSink, gateway_state: GatewayState) -> GatewayState:
    """Gateway whose editor answers every command with its own descriptor."""

    def respond(command: ToolCommand) -> None:
        gateway_state.complete(command.request_id, {"echo": command.tool_name, "arguments": command.arguments})

    sink.responder = respond
    return gateway_state


@pytest.fixture
def client(gateway_state: GatewayState) -> Generator[Any, None, None]:
    """TestClient for the MCP app."""
    from fastapi.testclient import TestClient

    from napkin_bridge.controllers.http import create_app

    with TestClient(create_app(gateway_state)) as test_client:
        yield test_client


def rpc(method: str, request_id: Any = 1, params: Any = None) -> dict:
    """Build a JSON-RPC request body."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if request_id is not None:
        message["id"] = request_id
    if params is not None:
        message["params"] = params
    return message
