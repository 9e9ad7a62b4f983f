"""
Napkin MCP HTTP Server

FastAPI application exposing the MCP endpoint (POST/GET /mcp) and a health check.
"""

import re

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from napkin_bridge.configs.constants import DEFAULT_APP_ORIGIN
from napkin_bridge.controllers.http.events import router as events_router
from napkin_bridge.controllers.http.mcp_protocol import router as mcp_router
from napkin_bridge.state import GatewayState
from napkin_bridge.version import __version__, get_current_version, get_server_info


def build_origin_regex(app_origin: str = DEFAULT_APP_ORIGIN) -> str:
    """Origins allowed by CORS: the embedding app plus localhost/loopback pages."""
    return (
        rf"(?:{re.escape(app_origin)}"
        r"|https?://localhost(?::\d+)?"
        r"|http://127\.0\.0\.1:\d+)"
    )


def create_app(state: GatewayState) -> FastAPI:
    """Build the HTTP app for one gateway instance."""
    app = FastAPI(
        title="Napkin MCP Gateway",
        description="MCP endpoint bridging automation clients to the Napkin editor",
        version=__version__,
    )
    app.state.gateway = state

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=build_origin_regex(state.config.app_origin),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.include_router(mcp_router, tags=["mcp"])
    app.include_router(events_router, tags=["mcp"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "server": get_server_info(),
            "build": get_current_version(),
            "pending_requests": state.bridge.pending_count,
        }

    return app


__all__ = ["build_origin_regex", "create_app"]
