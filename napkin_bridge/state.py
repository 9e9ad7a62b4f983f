"""
Gateway State

Everything one gateway instance shares between its HTTP handlers, its
lifecycle controller and the editor: configuration, the tool bridge and
the shutdown signal.
"""

import threading
from typing import Any, Optional

from napkin_bridge.bridge.channel import ApplicationChannel, ToolHandler
from napkin_bridge.bridge.correlator import CommandSink, ToolBridge
from napkin_bridge.configs.runtime import GatewayConfig, load_gateway_config


class GatewayState:
    """
    Shared state for one gateway instance.

    Handlers receive it through the FastAPI app (app.state.gateway); the
    editor talks to it through complete() and abandon().
    """

    def __init__(self, publish: CommandSink, config: Optional[GatewayConfig] = None):
        self.config = config or load_gateway_config()
        self.bridge = ToolBridge(publish=publish, timeout=self.config.request_timeout)
        self.shutdown_event = threading.Event()

    def complete(self, request_id: str, result: Any) -> bool:
        """Deliver an editor result; see ToolBridge.complete."""
        return self.bridge.complete(request_id, result)

    def abandon(self, request_id: str) -> bool:
        return self.bridge.abandon(request_id)


def create_local_gateway(
    handler: ToolHandler,
    config: Optional[GatewayConfig] = None,
) -> tuple[GatewayState, ApplicationChannel]:
    """
    Wire a gateway to an in-process editor handler.

    The returned channel is started; close it when the editor goes away so
    waiting callers are released instead of timing out.
    """
    channel = ApplicationChannel(handler)
    state = GatewayState(publish=channel.publish, config=config)
    channel.connect(deliver=state.complete, abandon=state.abandon)
    channel.start()
    return state, channel
