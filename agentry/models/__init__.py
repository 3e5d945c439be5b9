"""Core data models for agentry."""

from .events import Event, EventType, TerminateEvent, event_type_name, new_correlation_id
from .llm import (
    CompletionConfig,
    ContentItem,
    GatewayResponse,
    LlmMessage,
    MessageRole,
    ResponseFormat,
    StreamChunk,
    ToolCall,
    Usage,
)
from .tracing import TraceEvent

__all__ = [
    # Events
    "Event",
    "EventType",
    "TerminateEvent",
    "event_type_name",
    "new_correlation_id",
    # LLM
    "CompletionConfig",
    "ContentItem",
    "GatewayResponse",
    "LlmMessage",
    "MessageRole",
    "ResponseFormat",
    "StreamChunk",
    "ToolCall",
    "Usage",
    # Tracing
    "TraceEvent",
]
