"""Request-scoped access to the gateway state attached to the app."""

from fastapi import Request

from napkin_bridge.state import GatewayState


def get_gateway(request: Request) -> GatewayState:
    """FastAPI dependency returning the GatewayState the app was built with."""
    return request.app.state.gateway
