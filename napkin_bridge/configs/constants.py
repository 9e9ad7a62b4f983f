"""
Napkin Bridge Constants

Static protocol identity and default values for the gateway settings
that can be overridden through config.yaml or the environment.
"""

# --- Protocol Identity ---

PROTOCOL_VERSION = "2025-03-26"
SERVER_NAME = "napkin"
JSONRPC_VERSION = "2.0"

# --- JSON-RPC Error Codes ---

INTERNAL_ERROR = -32603

# --- Server Defaults ---

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 21420
DEFAULT_APP_ORIGIN = "tauri://localhost"

# --- Timeout Configuration ---
# Centralized timeout values (in seconds)

TIMEOUTS = {
    "request": 15,  # Wait for the application to answer a tool call
    "keepalive": 15,  # SSE keep-alive ping interval
    "startup": 5,  # Wait for uvicorn to report started
    "shutdown_grace": 5,  # Extra drain time on top of the request timeout
}

# --- Event Names ---

TOOL_REQUEST_EVENT = "mcp-tool-request"
READY_NOTIFICATION = "notifications/ready"


def get_timeout(key: str, default: int | float | None = None) -> int | float:
    """
    Get a timeout value by key.

    Args:
        key: Timeout key from TIMEOUTS dict
        default: Default value if key not found

    Returns:
        Timeout value in seconds
    """
    if default is None:
        default = TIMEOUTS["request"]
    return TIMEOUTS.get(key, default)
