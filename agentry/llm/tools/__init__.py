"""LLM tools."""

from .base import BaseTool, ILlmTool, ToolArgs, ToolDescriptor
from .current_datetime import CurrentDateTimeTool
from .wrapper import ToolWrapper

__all__ = [
    "BaseTool",
    "CurrentDateTimeTool",
    "ILlmTool",
    "ToolArgs",
    "ToolDescriptor",
    "ToolWrapper",
]
