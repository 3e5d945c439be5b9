"""Tool contracts for LLM function calling."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol

from ...errors import Result

ToolArgs = dict[str, Any]


@dataclass
class ToolDescriptor:
    """Name, description and JSON-schema parameter spec of a tool."""

    name: str
    description: str
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_dict(self) -> dict:
        """OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ILlmTool(Protocol):
    """A unit the model can invoke by name."""

    @property
    def name(self) -> str:
        ...

    def descriptor(self) -> ToolDescriptor:
        ...

    async def run(self, args: ToolArgs) -> Result[Any]:
        """Execute with parsed arguments; the Ok value must be JSON-serializable."""
        ...


class BaseTool(ABC):
    """Abstract base class for tools; the name comes from the descriptor."""

    @property
    def name(self) -> str:
        return self.descriptor().name

    @abstractmethod
    def descriptor(self) -> ToolDescriptor:
        ...

    @abstractmethod
    async def run(self, args: ToolArgs) -> Result[Any]:
        ...
