"""Expose an LlmAgent to another agent as a tool."""

from typing import TYPE_CHECKING, Any

from ...errors import Err, Ok, Result, ToolError
from .base import BaseTool, ToolArgs, ToolDescriptor

if TYPE_CHECKING:
    from ..agent import LlmAgent


class ToolWrapper(BaseTool):
    """Delegates a tool call to a wrapped agent.

    The tool takes a single ``input`` string, which becomes the agent's
    user message; the agent's reply is the tool result.
    """

    def __init__(self, agent: "LlmAgent", name: str, description: str):
        self._agent = agent
        self._name = name
        self._description = description

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self._name,
            description=self._description,
            parameters={
                "type": "object",
                "properties": {
                    "input": {
                        "type": "string",
                        "description": "Instructions for the expert.",
                    }
                },
                "required": ["input"],
            },
        )

    async def run(self, args: ToolArgs) -> Result[Any]:
        text = args.get("input")
        if not isinstance(text, str) or not text:
            return Err(ToolError("Missing required argument: input", tool_name=self._name))

        result = await self._agent.generate(text)
        if isinstance(result, Err):
            return Err(ToolError(result.error.message, tool_name=self._name))
        return Ok(result.value)
