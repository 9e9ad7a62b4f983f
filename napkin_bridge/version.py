"""
Version Management

Server identity reported by the MCP initialize handshake and /health.
"""

import os

from napkin_bridge.configs.constants import SERVER_NAME

__version__ = "0.4.2"


def get_current_version() -> dict:
    """
    Get current gateway version info.

    Returns:
        Dict with git_commit, build_time, version
    """
    return {
        "git_commit": os.environ.get("NAPKIN_GIT_COMMIT", "unknown"),
        "build_time": os.environ.get("NAPKIN_BUILD_TIME", "unknown"),
        "version": __version__,
    }


def get_server_info() -> dict:
    """Name/version pair advertised as MCP serverInfo."""
    return {"name": SERVER_NAME, "version": __version__}
