"""Tool surface for recording sessions."""

from demosmith.tools.registry import ToolRegistry
from demosmith.tools.actions import (
    ACTION_TOOLS,
    create_default_registry,
    register_default_tools,
    replay_step,
    tool_call_for_step,
)
from demosmith.tools.views import (
    ToolDefinition,
    ToolErrorInfo,
    ToolResult,
)

__all__ = [
    "ToolRegistry",
    "ACTION_TOOLS",
    "create_default_registry",
    "register_default_tools",
    "replay_step",
    "tool_call_for_step",
    "ToolDefinition",
    "ToolErrorInfo",
    "ToolResult",
]
