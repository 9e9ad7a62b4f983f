"""
Napkin Bridge Exception Hierarchy

Centralized exception classes for structured error handling across the gateway.
All gateway-specific exceptions inherit from NapkinError.

Usage:
    from napkin_bridge.exceptions import BridgeError, LifecycleError

    try:
        port = server.start()
    except LifecycleError as e:
        logger.error(f"Gateway start failed: {e}")
"""


class NapkinError(Exception):
    """Base exception for all gateway errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(NapkinError):
    """Error in gateway configuration."""

    pass


# =============================================================================
# Lifecycle Errors
# =============================================================================


class LifecycleError(NapkinError):
    """Base class for server start/stop errors."""

    pass


class AlreadyRunningError(LifecycleError):
    """start() called while the server is running."""

    def __init__(self, message: str = "API server is already running", details: dict | None = None):
        super().__init__(message, details)


class NotRunningError(LifecycleError):
    """stop() called while the server is stopped."""

    def __init__(self, message: str = "API server is not running", details: dict | None = None):
        super().__init__(message, details)


class ServerBindError(LifecycleError):
    """Listening socket could not be bound."""

    def __init__(self, message: str, host: str | None = None, port: int | None = None):
        details = {}
        if host is not None:
            details["host"] = host
        if port is not None:
            details["port"] = port
        super().__init__(message, details)
        self.host = host
        self.port = port


class ServerStartError(LifecycleError):
    """Serving thread exited or stalled before the server came up."""

    pass


# =============================================================================
# Bridge Errors
# =============================================================================


class BridgeError(NapkinError):
    """Base class for tool execution failures between gateway and application.

    These are reported to MCP callers as tool results flagged with isError,
    never as JSON-RPC protocol errors.
    """

    pass


class ToolTimeoutError(BridgeError):
    """Application did not answer within the request timeout."""

    def __init__(self, message: str = "Request timed out", request_id: str | None = None):
        super().__init__(message)
        self.request_id = request_id


class DispatchFailedError(BridgeError):
    """Command could not be published to the application."""

    def __init__(self, message: str, request_id: str | None = None):
        super().__init__(message)
        self.request_id = request_id


class ChannelClosedError(BridgeError):
    """Pending request was dropped before a result arrived."""

    def __init__(
        self,
        message: str = "Internal error: bridge channel closed",
        request_id: str | None = None,
    ):
        super().__init__(message)
        self.request_id = request_id


class ChannelUnavailableError(BridgeError):
    """Application channel is not accepting commands."""

    pass


# =============================================================================
# Protocol Errors
# =============================================================================


class ProtocolError(NapkinError):
    """JSON-RPC level failure, reported inside an error envelope."""

    code = -32600

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ParseError(ProtocolError):
    """Request body is not a JSON-RPC request or batch."""

    code = -32700


class MethodNotFoundError(ProtocolError):
    """No handler registered for the requested method."""

    code = -32601

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}")
        self.method = method
