"""
Bridge Correlator

Turns a tools/call into a command published to the editor and waits for the
editor to deliver the matching result.

Each invocation gets a fresh request_id and a single-use Future in the
pending table. The HTTP side awaits the Future; the editor resolves it by
calling complete() from its own thread. Whoever pops the entry from the
table first owns it, so a result is delivered at most once and anything
arriving after a timeout is dropped quietly.
"""

import asyncio
import threading
import uuid
from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Optional, Protocol

from napkin_bridge.configs import get_logger
from napkin_bridge.configs.constants import TIMEOUTS, TOOL_REQUEST_EVENT
from napkin_bridge.exceptions import (
    ChannelClosedError,
    DispatchFailedError,
    ToolTimeoutError,
)

logger = get_logger("bridge")


# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True)
class ToolCommand:
    """
    Command descriptor published to the editor for one tool invocation.

    Hosts that forward commands over an event bus emit to_dict() under the
    `event` name.
    """

    event: ClassVar[str] = TOOL_REQUEST_EVENT

    request_id: str
    tool_name: str
    arguments: Any = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Event payload sent to the editor."""
        return {
            "request_id": self.request_id,
            "tool_name": self.tool_name,
            "arguments": self.arguments,
        }


class CommandSink(Protocol):
    """Publishes a command to the editor. Raising means the command was not delivered."""

    def __call__(self, command: ToolCommand) -> None: ...


ResultSink = Callable[[str, Any], bool]


# =============================================================================
# Pending Request Table (Thread-Safe)
# =============================================================================


class PendingRequests:
    """
    Thread-safe table of in-flight requests.

    The lock is held only for one dict operation at a time, never while
    waiting or publishing.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._slots: dict[str, Future] = {}

    def add(self, request_id: str) -> Future:
        """Register a new slot. request_ids are never reused."""
        slot: Future = Future()
        with self._lock:
            if request_id in self._slots:
                raise KeyError(f"Duplicate request_id: {request_id}")
            self._slots[request_id] = slot
        return slot

    def pop(self, request_id: str) -> Optional[Future]:
        """Remove and return the slot, or None if it is gone already."""
        with self._lock:
            return self._slots.pop(request_id, None)

    def drain(self) -> dict[str, Future]:
        """Remove and return every slot."""
        with self._lock:
            slots = self._slots
            self._slots = {}
        return slots

    def __contains__(self, request_id: str) -> bool:
        with self._lock:
            return request_id in self._slots

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


# =============================================================================
# Bridge
# =============================================================================


class ToolBridge:
    """
    Correlates tool invocations with results delivered by the editor.

    invoke() is the producer side (publish, then wait); complete() is the
    consumer side and may be called from any thread at any time.
    """

    def __init__(
        self,
        publish: CommandSink,
        timeout: float = TIMEOUTS["request"],
    ):
        self._publish = publish
        self._timeout = timeout
        self._pending = PendingRequests()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, request_id: str) -> bool:
        return request_id in self._pending

    async def invoke(self, tool_name: str, arguments: Any = None) -> Any:
        """
        Publish a tool command and wait for the editor's result.

        Args:
            tool_name: Tool to run in the editor
            arguments: Tool arguments, passed through untouched

        Returns:
            Whatever value the editor delivered for this request

        Raises:
            DispatchFailedError: The command could not be published
            ChannelClosedError: The request was abandoned before a result arrived
            ToolTimeoutError: No result within the configured timeout
        """
        request_id = uuid.uuid4().hex
        slot = self._pending.add(request_id)
        command = ToolCommand(
            request_id=request_id,
            tool_name=tool_name,
            arguments=arguments if arguments is not None else {},
        )

        try:
            self._publish(command)
        except Exception as e:
            self._pending.pop(request_id)
            logger.error(f"Failed to emit tool request {request_id} ({tool_name}): {e}")
            raise DispatchFailedError(f"Failed to emit event: {e}", request_id=request_id) from e

        logger.debug(f"Published {tool_name} as {request_id}")

        try:
            return await asyncio.wait_for(asyncio.wrap_future(slot), timeout=self._timeout)
        except asyncio.TimeoutError:
            self._pending.pop(request_id)
            if not slot.cancel():
                # complete() already delivered; honour it
                return slot.result()
            logger.error(f"Bridge request {request_id} ({tool_name}) timed out after {self._timeout}s")
            raise ToolTimeoutError(request_id=request_id) from None
        except ChannelClosedError:
            logger.error(f"Bridge channel closed for request {request_id} ({tool_name})")
            raise
        except asyncio.CancelledError:
            self._pending.pop(request_id)
            logger.warning(f"Bridge request {request_id} ({tool_name}) cancelled by caller")
            raise

    def complete(self, request_id: str, result: Any) -> bool:
        """
        Deliver the editor's result for a request.

        Unknown, expired and already-completed request_ids are ignored.

        Returns:
            True if a waiting invocation received the result
        """
        slot = self._pending.pop(request_id)
        if slot is None:
            logger.debug(f"Dropping result for unknown or expired request {request_id}")
            return False

        try:
            slot.set_result(result)
        except InvalidStateError:
            # Waiter timed out between the pop and the delivery
            logger.debug(f"Request {request_id} was cancelled before delivery")
            return False
        return True

    def abandon(self, request_id: str) -> bool:
        """
        Drop one pending request; its waiter fails with ChannelClosedError.

        Returns:
            True if the request was still pending
        """
        slot = self._pending.pop(request_id)
        if slot is None:
            return False
        return _close_slot(request_id, slot)

    def close_all(self) -> int:
        """Abandon every pending request. Returns how many waiters were released."""
        closed = 0
        for request_id, slot in self._pending.drain().items():
            if _close_slot(request_id, slot):
                closed += 1
        if closed:
            logger.warning(f"Closed {closed} pending bridge requests")
        return closed


def _close_slot(request_id: str, slot: Future) -> bool:
    try:
        slot.set_exception(ChannelClosedError(request_id=request_id))
    except InvalidStateError:
        return False
    return True
