"""
Application Channel

In-process adapter between the bridge and an editor that exposes a plain
"run this tool" callback.

Follows the worker pattern used elsewhere in the gateway:
- Threading-based daemon
- Commands executed strictly one at a time, in publish order
- Handler failures delivered to the waiter as {"error": message}
"""

import queue
import threading
from typing import Any, Callable, Optional

from napkin_bridge.bridge.correlator import ResultSink, ToolCommand
from napkin_bridge.configs import get_logger
from napkin_bridge.exceptions import ChannelUnavailableError

logger = get_logger("bridge.channel")

ToolHandler = Callable[[str, Any], Any]  # (tool_name, arguments) -> result
AbandonSink = Callable[[str], bool]  # request_id -> was pending

_STOP = object()


class ApplicationChannel:
    """
    Queue-backed command sink running an editor handler on a worker thread.

    Usage:
        bridge = ToolBridge(publish=channel.publish)
        channel.connect(deliver=bridge.complete, abandon=bridge.abandon)
        channel.start()
    """

    def __init__(
        self,
        handler: ToolHandler,
        deliver: Optional[ResultSink] = None,
        abandon: Optional[AbandonSink] = None,
    ):
        self._handler = handler
        self._deliver = deliver
        self._abandon = abandon
        self._queue: queue.Queue = queue.Queue()
        self._running = False
        self._abandoned = 0
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def connect(self, deliver: ResultSink, abandon: Optional[AbandonSink] = None) -> None:
        """Attach the result sink (normally ToolBridge.complete)."""
        self._deliver = deliver
        self._abandon = abandon

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """
        Start the worker thread.

        Raises:
            ChannelUnavailableError: No result sink, or the previous worker is
                still finishing a command after close()
        """
        with self._lock:
            if self._running:
                return
            if self._deliver is None:
                raise ChannelUnavailableError("Application channel has no result sink")
            if self._thread is not None and self._thread.is_alive():
                raise ChannelUnavailableError("Previous application channel worker is still running")

            self._running = True
            self._abandoned = 0
            self._queue = queue.Queue()
            self._thread = threading.Thread(
                target=self._run_loop,
                args=(self._queue,),
                name="napkin-app-channel",
                daemon=True,
            )
            self._thread.start()
        logger.info("Application channel started")

    def close(self, timeout: float = 5) -> int:
        """
        Stop the worker and abandon every command still queued.

        The command being executed, if any, finishes first. If it outlasts
        the timeout, the worker exits once the handler returns and start()
        is refused until then.

        Returns:
            Number of queued commands that were abandoned
        """
        with self._lock:
            if not self._running:
                return 0
            self._running = False
            thread = self._thread
            work = self._queue
            work.put(_STOP)

        if thread is not None:
            thread.join(timeout=timeout)

        # Leftovers if the worker did not stop in time; the stop marker stays queued
        leftovers = []
        while True:
            try:
                leftovers.append(work.get_nowait())
            except queue.Empty:
                break
        for item in leftovers:
            if item is _STOP:
                work.put(_STOP)
            else:
                self._drop(item)

        if thread is not None and thread.is_alive():
            logger.warning(f"Application channel worker still busy after {timeout}s")
        else:
            with self._lock:
                if self._thread is thread:
                    self._thread = None

        abandoned = self._abandoned
        logger.info(f"Application channel closed ({abandoned} queued commands abandoned)")
        return abandoned

    def publish(self, command: ToolCommand) -> None:
        """Queue a command for the editor. Raises if the channel is not running."""
        with self._lock:
            if not self._running:
                raise ChannelUnavailableError("Application channel is not running")
            self._queue.put(command)

    def __call__(self, command: ToolCommand) -> None:
        self.publish(command)

    def _run_loop(self, work: queue.Queue) -> None:
        """Main processing loop."""
        while True:
            item = work.get()
            if item is _STOP:
                break
            if not self._running:
                self._drop(item)
                continue
            self._execute(item)

    def _execute(self, command: ToolCommand) -> None:
        """Run one command and deliver its outcome."""
        try:
            result = self._handler(command.tool_name, command.arguments)
        except Exception as e:
            logger.warning(f"Tool {command.tool_name} failed for {command.request_id}: {e}")
            result = {"error": str(e)}

        delivered = self._deliver(command.request_id, result)
        if not delivered:
            logger.debug(f"Result for {command.request_id} arrived after its waiter left")

    def _drop(self, command: ToolCommand) -> None:
        """Abandon a command that will never run."""
        if self._abandon is not None and self._abandon(command.request_id):
            with self._lock:
                self._abandoned += 1
