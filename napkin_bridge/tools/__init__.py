"""
Napkin MCP Tools

The catalog of editor tools advertised through tools/list.
"""

from napkin_bridge.tools.catalog import (
    TOOL_DEFINITIONS,
    ToolDefinition,
    get_tool,
    list_tools,
    tool_names,
)

__all__ = [
    "TOOL_DEFINITIONS",
    "ToolDefinition",
    "get_tool",
    "list_tools",
    "tool_names",
]
