"""
Gateway-to-editor bridge.

ToolBridge correlates tool calls with results delivered by the editor;
ApplicationChannel runs an in-process editor handler behind it.
"""

from napkin_bridge.bridge.channel import ApplicationChannel, ToolHandler
from napkin_bridge.bridge.correlator import (
    CommandSink,
    PendingRequests,
    ResultSink,
    ToolBridge,
    ToolCommand,
)

__all__ = [
    "ApplicationChannel",
    "CommandSink",
    "PendingRequests",
    "ResultSink",
    "ToolBridge",
    "ToolCommand",
    "ToolHandler",
]
