"""MCP server lifecycle."""

from napkin_bridge.server.lifecycle import GatewayServer, bind_socket

__all__ = ["GatewayServer", "bind_socket"]
