"""
Tests for the MCP tool catalog.
"""

import pytest

from napkin_bridge.tools import TOOL_DEFINITIONS, get_tool, list_tools, tool_names

EXPECTED_TOOLS = [
    "get_canvas",
    "list_shapes",
    "get_shape",
    "create_shape",
    "update_shape",
    "delete_shape",
    "create_image",
    "create_connection",
    "set_viewport",
    "select_shapes",
    "list_tabs",
    "create_tab",
    "switch_tab",
    "rename_tab",
    "bring_to_front",
    "send_to_back",
    "bring_forward",
    "send_backward",
    "group_shapes",
    "ungroup",
    "clear_canvas",
    "batch_operations",
    "reorganize",
    "set_snap_settings",
]


class TestCatalogContents:
    """Tests for the static tool list."""

    def test_expected_count(self):
        assert len(list_tools()) == 24

    def test_contains_every_editor_tool(self):
        assert tool_names() == EXPECTED_TOOLS

    def test_names_are_unique(self):
        names = tool_names()
        assert len(set(names)) == len(names)

    @pytest.mark.parametrize("tool", list_tools(), ids=lambda t: t["name"])
    def test_entry_has_required_fields(self, tool):
        assert isinstance(tool["name"], str) and tool["name"]
        assert isinstance(tool["description"], str) and tool["description"]
        assert isinstance(tool["inputSchema"], dict)
        assert tool["inputSchema"]["type"] == "object"
        assert isinstance(tool["inputSchema"]["properties"], dict)

    def test_required_fields_are_declared_properties(self):
        for tool in list_tools():
            schema = tool["inputSchema"]
            for field in schema.get("required", []):
                assert field in schema["properties"], f"{tool['name']}: {field}"


class TestCatalogSchemas:
    """Spot checks on the schemas generated from the input models."""

    def test_create_shape_requires_position(self):
        schema = get_tool("create_shape").input_schema
        assert schema["required"] == ["type", "x", "y"]
        assert "line" not in schema["properties"]["type"]["enum"]
        assert "sticky" in schema["properties"]["type"]["enum"]
        assert schema["properties"]["x"]["type"] == "number"

    def test_list_shapes_filter_is_enumerated(self):
        schema = get_tool("list_shapes").input_schema
        variants = schema["properties"]["type"]["anyOf"]
        enums = [v["enum"] for v in variants if "enum" in v]
        assert enums and "freedraw" in enums[0]
        assert "required" not in schema

    def test_reorganize_algorithms(self):
        schema = get_tool("reorganize").input_schema
        assert schema["properties"]["algorithm"]["enum"] == ["grid", "force-directed"]

    @pytest.mark.parametrize("tool", list_tools(), ids=lambda t: t["name"])
    def test_unknown_arguments_not_advertised(self, tool):
        assert tool["inputSchema"]["additionalProperties"] is False

    @pytest.mark.parametrize("tool", list_tools(), ids=lambda t: t["name"])
    def test_model_titles_are_stripped(self, tool):
        schema = tool["inputSchema"]
        assert "title" not in schema
        for name, prop in schema["properties"].items():
            assert "title" not in prop, f"{tool['name']}.{name}"

    def test_property_named_title_survives(self):
        schema = get_tool("rename_tab").input_schema
        assert schema["required"] == ["tabId", "title"]
        assert schema["properties"]["title"]["description"] == "New title for the tab"

    def test_batch_operation_items(self):
        schema = get_tool("batch_operations").input_schema
        operation = schema["$defs"]["BatchOperation"]
        assert operation["properties"]["action"]["enum"] == ["create", "update", "delete"]
        assert operation["required"] == ["action", "data"]
        assert "title" not in operation

    def test_empty_tools_have_no_properties(self):
        for name in ("get_canvas", "list_tabs", "clear_canvas"):
            assert get_tool(name).input_schema["properties"] == {}

    def test_unknown_tool(self):
        assert get_tool("draw_unicorn") is None


class TestCatalogImmutability:
    """The catalog is served verbatim on every call."""

    def test_repeated_calls_are_stable(self):
        assert list_tools() == list_tools()

    def test_mutating_result_does_not_leak(self):
        tools = list_tools()
        tools[0]["inputSchema"]["properties"]["hacked"] = {"type": "string"}
        tools.pop()

        fresh = list_tools()
        assert len(fresh) == len(TOOL_DEFINITIONS)
        assert "hacked" not in fresh[0]["inputSchema"]["properties"]

    def test_definitions_are_frozen(self):
        with pytest.raises(AttributeError):
            TOOL_DEFINITIONS[0].name = "renamed"
