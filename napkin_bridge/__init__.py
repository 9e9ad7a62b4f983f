"""
Napkin Bridge - MCP gateway for the Napkin editor.

Exposes a JSON-RPC endpoint that lets automation clients run editor tools.
Tool calls are published to the editor as commands and answered once the
editor delivers the matching result.

Usage:
    state = GatewayState(publish=emit_to_editor)
    server = GatewayServer(state)
    port = server.start()
    ...
    state.complete(request_id, result)  # from the editor, any thread
    server.stop()
"""

from napkin_bridge.bridge import ApplicationChannel, ToolBridge, ToolCommand
from napkin_bridge.configs import GatewayConfig, load_gateway_config
from napkin_bridge.server import GatewayServer
from napkin_bridge.state import GatewayState, create_local_gateway
from napkin_bridge.version import __version__

__all__ = [
    "ApplicationChannel",
    "GatewayConfig",
    "GatewayServer",
    "GatewayState",
    "ToolBridge",
    "ToolCommand",
    "__version__",
    "create_local_gateway",
    "load_gateway_config",
]
