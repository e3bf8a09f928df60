from .context import ToolContext
from .registry import TOOLS, TOOLS_BY_NAME, ToolError, ToolSpec, call_tool, dispatch, tool_definitions

__all__ = [
    "TOOLS",
    "TOOLS_BY_NAME",
    "ToolContext",
    "ToolError",
    "ToolSpec",
    "call_tool",
    "dispatch",
    "tool_definitions",
]
