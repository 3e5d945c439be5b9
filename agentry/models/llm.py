"""LLM conversation data models."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

FinishReason = Literal["stop", "length", "tool_calls", "content_filter"]


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass
class ContentItem:
    """One part of a multimodal message: text or an image reference."""

    type: Literal["text", "image_url"]
    text: str | None = None
    image_url: str | None = None

    @classmethod
    def of_text(cls, text: str) -> "ContentItem":
        return cls(type="text", text=text)

    @classmethod
    def of_image(cls, url: str) -> "ContentItem":
        return cls(type="image_url", image_url=url)

    def to_dict(self) -> dict:
        if self.type == "text":
            return {"type": "text", "text": self.text or ""}
        return {"type": "image_url", "image_url": {"url": self.image_url}}


@dataclass
class ToolCall:
    """A provider-issued request to invoke a named tool."""

    id: str
    name: str
    arguments: str  # JSON-encoded argument object
    type: Literal["function"] = "function"

    def parse_arguments(self) -> dict:
        """Decode the argument blob; raises ValueError on malformed JSON."""
        if not self.arguments or not self.arguments.strip():
            return {}
        args = json.loads(self.arguments)
        if not isinstance(args, dict):
            raise ValueError(
                f"Arguments for {self.name} must be a JSON object, got {type(args).__name__}"
            )
        return args

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class LlmMessage:
    """One turn in an LLM conversation."""

    role: MessageRole
    content: str | list[ContentItem]
    name: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    @classmethod
    def system(cls, content: str) -> "LlmMessage":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str | list[ContentItem]) -> "LlmMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str, tool_calls: list[ToolCall] | None = None
    ) -> "LlmMessage":
        return cls(
            role=MessageRole.ASSISTANT,
            content=content,
            tool_calls=list(tool_calls) if tool_calls else None,
        )

    @classmethod
    def tool(cls, content: str, tool_call_id: str, name: str) -> "LlmMessage":
        return cls(
            role=MessageRole.TOOL,
            content=content,
            tool_call_id=tool_call_id,
            name=name,
        )

    @property
    def text(self) -> str:
        """Text content, with multimodal parts flattened."""
        if isinstance(self.content, str):
            return self.content
        return "".join(item.text or "" for item in self.content if item.type == "text")


@dataclass
class ResponseFormat:
    """Requested response shape."""

    type: Literal["json_object", "text"] = "text"
    schema: dict[str, Any] | None = None


@dataclass
class CompletionConfig:
    """Configuration for completion requests."""

    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop: list[str] | None = None
    response_format: ResponseFormat | None = None


@dataclass
class Usage:
    """Token usage reported by a provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class GatewayResponse:
    """A whole completion returned by a gateway."""

    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: FinishReason | None = None
    usage: Usage | None = None
    model: str | None = None


@dataclass
class StreamChunk:
    """One increment of a streamed completion."""

    content: str | None = None
    tool_calls: list[ToolCall] | None = None
    finish_reason: FinishReason | None = None
    done: bool = False
