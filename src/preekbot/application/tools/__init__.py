"""Tools the model can call."""

from preekbot.application.tools.executor import (
    GENERIC_TOOL_ERROR,
    ToolExecutor,
    ToolOutcome,
)
from preekbot.application.tools.registry import (
    TOOL_SPECS,
    ToolSpec,
    available_tools,
    tool_definitions,
)

__all__ = [
    "GENERIC_TOOL_ERROR",
    "TOOL_SPECS",
    "ToolExecutor",
    "ToolOutcome",
    "ToolSpec",
    "available_tools",
    "tool_definitions",
]
