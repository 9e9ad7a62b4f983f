"""
MCP Server Lifecycle

Starts, stops and reports on the uvicorn server behind the MCP endpoint.
The server runs on its own daemon thread so the embedding editor keeps
control of its main thread.
"""

import math
import socket
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI

from napkin_bridge.configs import get_logger
from napkin_bridge.controllers.http import create_app
from napkin_bridge.exceptions import (
    AlreadyRunningError,
    NotRunningError,
    ServerBindError,
    ServerStartError,
)
from napkin_bridge.state import GatewayState

logger = get_logger("server")

STARTUP_POLL_INTERVAL = 0.01  # seconds


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind the listening socket up front so bind failures reach the caller.

    Raises:
        ServerBindError: Address unavailable or already in use
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        logger.error(f"Failed to bind API server on {host}:{port}: {e}")
        raise ServerBindError(f"Failed to bind {host}:{port}: {e}", host=host, port=port) from e
    return sock


class GatewayServer:
    """
    Lifecycle controller for the MCP HTTP server.

    Stopped -> Running only through start(); Running -> Stopped only through stop().
    """

    def __init__(self, state: GatewayState, app: Optional[FastAPI] = None):
        self._state = state
        self._app = app or create_app(state)
        self._lock = threading.Lock()
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._port: Optional[int] = None

    @property
    def app(self) -> FastAPI:
        return self._app

    @property
    def port(self) -> Optional[int]:
        """Bound port while running, else None."""
        return self._port

    def status(self) -> bool:
        """True while the server is running."""
        return self._server is not None

    def start(self) -> int:
        """
        Bind the listener and start serving.

        Returns:
            The bound port (the configured one, or the OS pick when it is 0)

        Raises:
            AlreadyRunningError: Server is already running
            ServerBindError: Listener could not be bound
            ServerStartError: Server did not come up within the startup timeout
        """
        with self._lock:
            if self._server is not None:
                raise AlreadyRunningError()

            config = self._state.config
            sock = bind_socket(config.host, config.port)
            port = sock.getsockname()[1]

            server = uvicorn.Server(
                uvicorn.Config(
                    self._app,
                    log_level="warning",
                    log_config=None,  # Use the host's logging config, not uvicorn's
                    timeout_graceful_shutdown=math.ceil(config.shutdown_timeout),
                )
            )
            self._state.shutdown_event.clear()

            thread = threading.Thread(
                target=self._serve,
                args=(server, sock),
                name="napkin-mcp-server",
                daemon=True,
            )
            thread.start()

            if not self._wait_started(server, thread, config.startup_timeout):
                server.should_exit = True
                self._state.shutdown_event.set()
                thread.join(timeout=config.startup_timeout)
                sock.close()
                raise ServerStartError(
                    "MCP server failed to start",
                    {"host": config.host, "port": port},
                )

            self._server = server
            self._thread = thread
            self._port = port

        logger.info(f"MCP server listening on http://{config.host}:{port}/mcp")
        return port

    def stop(self) -> bool:
        """
        Gracefully stop the server.

        New connections are refused; in-flight requests are allowed to finish.
        If the server is still draining after the shutdown timeout it keeps
        the listening socket, so it stays Running; call stop() again to keep
        waiting.

        Returns:
            True once the server has stopped, False if it is still draining

        Raises:
            NotRunningError: Server is not running
        """
        with self._lock:
            if self._server is None:
                raise NotRunningError()

            server, thread = self._server, self._thread
            self._state.shutdown_event.set()
            server.should_exit = True

            timeout = self._state.config.shutdown_timeout
            if thread is not None:
                thread.join(timeout=timeout)
                if thread.is_alive():
                    logger.warning(f"MCP server still draining after {timeout}s; keeping it marked running")
                    return False

            self._server = None
            self._thread = None
            self._port = None

        logger.info("MCP server stopped")
        return True

    @staticmethod
    def _wait_started(server: uvicorn.Server, thread: threading.Thread, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if server.started:
                return True
            if not thread.is_alive():
                return False
            time.sleep(STARTUP_POLL_INTERVAL)
        return server.started

    @staticmethod
    def _serve(server: uvicorn.Server, sock: socket.socket) -> None:
        try:
            server.run(sockets=[sock])
        except Exception as e:
            logger.error(f"MCP server error: {e}")
        finally:
            sock.close()
