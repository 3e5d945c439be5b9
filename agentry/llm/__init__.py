"""LLM module: gateways, tools, the broker and conversation helpers."""

from .agent import LlmAgent
from .broker import LlmBroker
from .chat_session import ChatSession
from .gateway import ILlmGateway
from .gateways import AnthropicGateway, OpenAIGateway, create_gateway
from .tools import BaseTool, CurrentDateTimeTool, ILlmTool, ToolDescriptor, ToolWrapper

__all__ = [
    "AnthropicGateway",
    "BaseTool",
    "ChatSession",
    "CurrentDateTimeTool",
    "ILlmGateway",
    "ILlmTool",
    "LlmAgent",
    "LlmBroker",
    "OpenAIGateway",
    "ToolDescriptor",
    "ToolWrapper",
    "create_gateway",
]
