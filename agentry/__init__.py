"""agentry: event-driven agents and a tool-calling LLM broker."""

from .agents import (
    AsyncAggregatorAgent,
    AsyncDispatcher,
    AsyncLlmAgent,
    AsyncLlmAgentWithMemory,
    IAgent,
    IAsyncAgent,
    IterativeProblemSolver,
    Router,
    SimpleRecursiveAgent,
)
from .app import Application, IApplication
from .context import SharedWorkingMemory
from .errors import (
    AgentryError,
    Err,
    ErrorKind,
    GatewayError,
    Ok,
    ParseError,
    Result,
    TimeoutExceededError,
    ToolError,
    ValidationError,
    is_err,
    is_ok,
    unwrap,
    unwrap_or,
)
from .llm import (
    AnthropicGateway,
    BaseTool,
    ChatSession,
    CurrentDateTimeTool,
    ILlmGateway,
    ILlmTool,
    LlmAgent,
    LlmBroker,
    OpenAIGateway,
    ToolDescriptor,
    ToolWrapper,
)
from .models import (
    CompletionConfig,
    Event,
    LlmMessage,
    MessageRole,
    TerminateEvent,
    ToolCall,
    TraceEvent,
)
from .storage import IStorage, Storage
from .tracker import ITracker, NullTracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Errors
    "AgentryError",
    "ErrorKind",
    "GatewayError",
    "ParseError",
    "TimeoutExceededError",
    "ToolError",
    "ValidationError",
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "is_err",
    "unwrap",
    "unwrap_or",
    # Models
    "Event",
    "TerminateEvent",
    "LlmMessage",
    "MessageRole",
    "ToolCall",
    "CompletionConfig",
    "TraceEvent",
    # Agents
    "IAgent",
    "IAsyncAgent",
    "Router",
    "AsyncDispatcher",
    "AsyncAggregatorAgent",
    "AsyncLlmAgent",
    "AsyncLlmAgentWithMemory",
    "IterativeProblemSolver",
    "SimpleRecursiveAgent",
    "SharedWorkingMemory",
    # LLM
    "ILlmGateway",
    "AnthropicGateway",
    "OpenAIGateway",
    "LlmBroker",
    "ChatSession",
    "LlmAgent",
    "ILlmTool",
    "BaseTool",
    "ToolDescriptor",
    "CurrentDateTimeTool",
    "ToolWrapper",
    # Components
    "IStorage",
    "Storage",
    "ITracker",
    "Tracker",
    "NullTracker",
]
