"""
MCP Event Stream

GET /mcp opens a Server-Sent Events stream. It announces readiness once and
then carries keep-alive pings only; no other events are pushed.
"""

import asyncio
import json
import threading
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from napkin_bridge.configs import get_logger
from napkin_bridge.configs.constants import JSONRPC_VERSION, READY_NOTIFICATION
from napkin_bridge.controllers.http.deps import get_gateway
from napkin_bridge.state import GatewayState

logger = get_logger("http.events")

router = APIRouter()

SHUTDOWN_POLL_INTERVAL = 0.5  # seconds


def ready_notification() -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "method": READY_NOTIFICATION}


async def ready_then_idle(
    shutdown: threading.Event,
    poll_interval: float = SHUTDOWN_POLL_INTERVAL,
) -> AsyncIterator[dict]:
    """
    Yield the readiness event, then stay open until the gateway shuts down.

    Client disconnects are handled by EventSourceResponse, which cancels
    this generator.
    """
    yield {"data": json.dumps(ready_notification())}

    while not shutdown.is_set():
        await asyncio.sleep(poll_interval)

    logger.debug("Event stream closed for shutdown")


@router.get("/mcp")
async def mcp_events(gateway: GatewayState = Depends(get_gateway)) -> EventSourceResponse:
    """Open the MCP notification stream."""
    logger.info("MCP event stream opened")
    return EventSourceResponse(
        ready_then_idle(gateway.shutdown_event),
        ping=gateway.config.keepalive_interval,
    )
