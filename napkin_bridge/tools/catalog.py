"""
MCP Tool Catalog

Every tool the editor accepts through tools/call. Each tool's arguments are
described by a pydantic input model; tools/list serves the JSON schema
generated from it. The gateway only advertises these schemas, argument
checking happens in the editor.
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

ShapeType = Literal[
    "rectangle",
    "ellipse",
    "triangle",
    "diamond",
    "hexagon",
    "star",
    "cloud",
    "cylinder",
    "sticky",
    "line",
    "arrow",
    "freedraw",
    "text",
]

# Lines and arrows go through create_connection
CreatableShapeType = Literal[
    "rectangle",
    "ellipse",
    "triangle",
    "diamond",
    "hexagon",
    "star",
    "cloud",
    "cylinder",
    "sticky",
    "text",
]

StrokeStyle = Literal["solid", "dashed", "dotted"]
FillStyle = Literal["hachure", "solid", "zigzag", "cross-hatch", "dots"]

SHAPE_TYPES: list[str] = list(get_args(ShapeType))


class ToolInput(BaseModel):
    """Base for tool argument models: unknown arguments are not advertised."""

    model_config = ConfigDict(extra="forbid")


# --- Tool Input Models ---


class EmptyInput(ToolInput):
    pass


class ShapeIdInput(ToolInput):
    id: str = Field(..., description="Shape ID")


class ListShapesInput(ToolInput):
    type: Optional[ShapeType] = Field(
        None, description=f"Filter by shape type ({', '.join(SHAPE_TYPES)})"
    )


class CreateShapeInput(ToolInput):
    type: CreatableShapeType = Field(..., description="Shape type to create")
    x: float = Field(..., description="X position")
    y: float = Field(..., description="Y position")
    width: Optional[float] = Field(None, description="Width (default: 200)")
    height: Optional[float] = Field(None, description="Height (default: 150)")
    strokeColor: Optional[str] = Field(None, description="Stroke color (default: #000000)")
    strokeWidth: Optional[float] = Field(None, description="Stroke width (default: 2)")
    fillColor: Optional[str] = Field(None, description="Fill color (default: transparent)")
    opacity: Optional[float] = Field(None, description="Opacity 0-1 (default: 1)")
    roughness: Optional[float] = Field(None, description="Roughness 0-3 (default: 1)")
    text: Optional[str] = Field(None, description="Text content")
    fontSize: Optional[float] = Field(None, description="Font size for text shapes (default: 20)")
    stickyColor: Optional[str] = Field(None, description="Sticky note background color")
    rotation: Optional[float] = Field(None, description="Rotation in degrees")
    strokeStyle: Optional[StrokeStyle] = Field(None, description="Stroke style")
    fillStyle: Optional[FillStyle] = Field(None, description="Fill style")


class UpdateShapeInput(ToolInput):
    id: str = Field(..., description="Shape ID to update")
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    strokeColor: Optional[str] = None
    strokeWidth: Optional[float] = None
    fillColor: Optional[str] = None
    opacity: Optional[float] = None
    roughness: Optional[float] = None
    text: Optional[str] = None
    rotation: Optional[float] = None
    strokeStyle: Optional[str] = None
    fillStyle: Optional[str] = None


class DeleteShapeInput(ToolInput):
    id: str = Field(..., description="Shape ID to delete")


class CreateImageInput(ToolInput):
    url: str = Field(
        ...,
        description="Image source: an http/https URL or a base64 data URL (e.g. data:image/png;base64,...)",
    )
    x: Optional[float] = Field(None, description="X position (default: 0)")
    y: Optional[float] = Field(None, description="Y position (default: 0)")
    width: Optional[float] = Field(None, description="Width (optional, auto-calculated from image if omitted)")
    height: Optional[float] = Field(None, description="Height (optional, auto-calculated from image if omitted)")


class CreateConnectionInput(ToolInput):
    fromShapeId: str = Field(..., description="Source shape ID")
    toShapeId: str = Field(..., description="Target shape ID")
    connectionType: Optional[Literal["arrow", "line"]] = Field(
        None, description="Type of connection (default: arrow)"
    )
    routingMode: Optional[Literal["direct", "elbow", "curved"]] = Field(
        None, description="Line routing mode (default: direct)"
    )
    text: Optional[str] = Field(None, description="Label text on the connection")
    strokeColor: Optional[str] = None
    strokeWidth: Optional[float] = None


class SetViewportInput(ToolInput):
    x: Optional[float] = Field(None, description="Pan X offset")
    y: Optional[float] = Field(None, description="Pan Y offset")
    zoom: Optional[float] = Field(None, description="Zoom level (0.1 to 10)")


class SelectShapesInput(ToolInput):
    ids: list[str] = Field(..., description="Array of shape IDs to select")


class CreateTabInput(ToolInput):
    title: Optional[str] = Field(None, description="Tab title (default: Untitled)")


class SwitchTabInput(ToolInput):
    tabId: str = Field(..., description="Tab ID to switch to")


class RenameTabInput(ToolInput):
    tabId: str = Field(..., description="Tab ID to rename")
    title: str = Field(..., description="New title for the tab")


class BringToFrontInput(ToolInput):
    id: str = Field(..., description="Shape ID to bring to front")


class SendToBackInput(ToolInput):
    id: str = Field(..., description="Shape ID to send to back")


class BringForwardInput(ToolInput):
    id: str = Field(..., description="Shape ID to bring forward")


class SendBackwardInput(ToolInput):
    id: str = Field(..., description="Shape ID to send backward")


class GroupShapesInput(ToolInput):
    ids: list[str] = Field(..., description="Array of shape IDs to group (minimum 2)")


class UngroupInput(ToolInput):
    groupId: str = Field(..., description="Group ID to ungroup")


class BatchOperation(BaseModel):
    action: Literal["create", "update", "delete"]
    data: dict[str, Any] = Field(..., description="Shape data for create/update, or {id} for delete")


class BatchOperationsInput(ToolInput):
    operations: list[BatchOperation] = Field(..., description="Array of operations to perform")


class ReorganizeInput(ToolInput):
    algorithm: Literal["grid", "force-directed"] = Field(..., description="Layout algorithm to use")
    shapeIds: Optional[list[str]] = Field(
        None, description="Shape IDs to reorganize. If omitted, all shapes are reorganized."
    )
    padding: Optional[float] = Field(None, description="Padding between shapes for grid layout (default: 40)")
    iterations: Optional[float] = Field(
        None, description="Number of iterations for force-directed layout (default: 100)"
    )


class SnapSettingsInput(ToolInput):
    snapToGrid: Optional[bool] = Field(None, description="Enable/disable snap to grid (20px grid)")
    alignmentHints: Optional[bool] = Field(None, description="Enable/disable alignment guide lines")
    objectSnap: Optional[bool] = Field(None, description="Enable/disable magnetic snap to aligned shapes")


# --- Tool Registry ---


def _strip_titles(schema: dict) -> dict:
    """Drop the title pydantic adds to every model and field."""
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        _strip_titles(prop)
    for variant in schema.get("anyOf", []):
        _strip_titles(variant)
    if isinstance(schema.get("items"), dict):
        _strip_titles(schema["items"])
    for definition in schema.get("$defs", {}).values():
        _strip_titles(definition)
    return schema


@dataclass(frozen=True)
class ToolDefinition:
    """One advertised tool: name, description and the model describing its arguments."""

    name: str
    description: str
    input_model: type[BaseModel]

    @property
    def input_schema(self) -> dict:
        """JSON schema for the arguments; a fresh dict on every access."""
        return _strip_titles(self.input_model.model_json_schema())

    def to_dict(self) -> dict[str, Any]:
        """MCP wire form."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        "get_canvas",
        "Get the full canvas state including all shapes, viewport, and groups",
        EmptyInput,
    ),
    ToolDefinition(
        "list_shapes",
        "List all shapes on the canvas, optionally filtered by type",
        ListShapesInput,
    ),
    ToolDefinition("get_shape", "Get a single shape by its ID", ShapeIdInput),
    ToolDefinition(
        "create_shape",
        "Create a new shape on the canvas. For geometric shapes (rectangle, ellipse, "
        "triangle, diamond, hexagon, star, cloud, cylinder) provide x, y, width, height. "
        "For sticky notes, also provide text and optionally stickyColor. For text shapes, "
        "provide text, fontSize. Returns the created shape.",
        CreateShapeInput,
    ),
    ToolDefinition(
        "update_shape",
        "Update properties of an existing shape. Only provide the properties you want to change.",
        UpdateShapeInput,
    ),
    ToolDefinition("delete_shape", "Delete a shape by its ID", DeleteShapeInput),
    ToolDefinition(
        "create_image",
        "Add an image to the canvas from a URL or base64 data URL. Supports PNG, JPEG, "
        "SVG, GIF. The image is embedded in the canvas.",
        CreateImageInput,
    ),
    ToolDefinition(
        "create_connection",
        "Create a line or arrow connecting two shapes. The connection will bind to the "
        "shapes' connection points.",
        CreateConnectionInput,
    ),
    ToolDefinition("set_viewport", "Set the canvas viewport (pan and zoom)", SetViewportInput),
    ToolDefinition("select_shapes", "Select shapes on the canvas by their IDs", SelectShapesInput),
    ToolDefinition("list_tabs", "List all open tabs", EmptyInput),
    ToolDefinition("create_tab", "Create a new tab", CreateTabInput),
    ToolDefinition("switch_tab", "Switch to a different tab", SwitchTabInput),
    ToolDefinition("rename_tab", "Rename a tab", RenameTabInput),
    ToolDefinition(
        "bring_to_front",
        "Move a shape to the top of the z-order (renders on top of all other shapes)",
        BringToFrontInput,
    ),
    ToolDefinition(
        "send_to_back",
        "Move a shape to the bottom of the z-order (renders behind all other shapes)",
        SendToBackInput,
    ),
    ToolDefinition("bring_forward", "Move a shape one layer forward in z-order", BringForwardInput),
    ToolDefinition("send_backward", "Move a shape one layer backward in z-order", SendBackwardInput),
    ToolDefinition("group_shapes", "Group multiple shapes together", GroupShapesInput),
    ToolDefinition("ungroup", "Ungroup a shape group", UngroupInput),
    ToolDefinition("clear_canvas", "Clear all shapes from the canvas", EmptyInput),
    ToolDefinition(
        "batch_operations",
        "Perform multiple create/update/delete operations in a single batch. Each "
        "operation specifies an action and the relevant data.",
        BatchOperationsInput,
    ),
    ToolDefinition(
        "reorganize",
        "Reorganize shapes on the canvas using an automatic layout algorithm. Applies to "
        "selected shape IDs (or all shapes if none specified). Supports grid layout "
        "(arranges shapes in a neat grid) and force-directed layout (positions shapes "
        "based on their connections). Bound arrows are automatically updated after layout.",
        ReorganizeInput,
    ),
    ToolDefinition(
        "set_snap_settings",
        "Configure snapping behavior. Controls snap-to-grid, alignment hints (visual guide "
        "lines when edges/centers align), and object snap (magnetic snap to aligned positions).",
        SnapSettingsInput,
    ),
)

_TOOLS_BY_NAME = {tool.name: tool for tool in TOOL_DEFINITIONS}


def list_tools() -> list[dict[str, Any]]:
    """Return the catalog in MCP tools/list format."""
    return [tool.to_dict() for tool in TOOL_DEFINITIONS]


def get_tool(name: str) -> Optional[ToolDefinition]:
    """Look up a tool definition by name."""
    return _TOOLS_BY_NAME.get(name)


def tool_names() -> list[str]:
    return [tool.name for tool in TOOL_DEFINITIONS]
