import pytest

from sdkfoundry.server.tools import TOOLS, TOOLS_BY_NAME, ToolError, call_tool, dispatch, tool_definitions


def test_nineteen_tools_with_unique_names():
    assert len(TOOLS) == 19
    assert len(TOOLS_BY_NAME) == 19


def test_definitions_shape():
    for definition in tool_definitions():
        assert set(definition) == {"name", "description", "inputSchema"}
        assert definition["inputSchema"]["type"] == "object"
        for key in definition["inputSchema"].get("required", []):
            assert key in definition["inputSchema"]["properties"]


def test_every_schema_argument_is_mapped():
    for tool in TOOLS:
        mapped = {key for key, _ in tool.arguments}
        assert mapped == set(tool.input_schema["properties"]), tool.name


def test_call_tool_maps_camel_case_arguments(ctx):
    text = call_tool(ctx, "get_component_schema", {"componentName": "Interactable"})
    assert text.startswith("# Interactable Component")


def test_optional_arguments_may_be_null(ctx):
    text = call_tool(ctx, "get_validation_rules", {"componentOrSystem": None})
    assert text.startswith("# All Validation Rules")


def test_call_tool_errors(ctx):
    with pytest.raises(ToolError, match="Unknown tool: nope"):
        call_tool(ctx, "nope", {})
    with pytest.raises(ToolError, match="Missing arguments"):
        call_tool(ctx, "validate_code", None)
    with pytest.raises(ToolError, match="Missing required argument: code"):
        call_tool(ctx, "validate_code", {})


def test_dispatch_wraps_text(ctx):
    result = dispatch(ctx, "get_system_info", {"systemName": "GrabSystem"})
    assert result["content"][0]["type"] == "text"
    assert result["content"][0]["text"].startswith("# GrabSystem")


def test_dispatch_turns_errors_into_text(ctx):
    assert dispatch(ctx, "nope", {}) == {"content": [{"type": "text", "text": "Error: Unknown tool: nope"}]}


def test_dispatch_handler_exception(ctx):
    result = dispatch(ctx, "generate_system_template", {"systemName": "X", "queries": [{"required": ["A"]}]})
    assert result["content"][0]["text"].startswith("Error: ")
