"""Test doubles shared across test modules."""

import json
from typing import Any

from agentry.errors import AgentryError, Err, Ok, Result, ToolError
from agentry.llm.tools import BaseTool, ToolArgs, ToolDescriptor
from agentry.models import GatewayResponse, StreamChunk, ToolCall


def text_response(content: str) -> GatewayResponse:
    return GatewayResponse(content=content, finish_reason="stop")


def tool_response(*calls: ToolCall, content: str = "") -> GatewayResponse:
    return GatewayResponse(content=content, tool_calls=list(calls), finish_reason="tool_calls")


def make_call(name: str, args: dict | None = None, call_id: str = "call_1") -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=json.dumps(args or {}))


class ScriptedGateway:
    """Gateway returning queued responses and recording every request.

    ``responses`` feed ``generate``; an AgentryError entry becomes an Err
    and any other exception entry is raised.
    ``streams`` feed ``generate_stream``, one list of chunks per call.
    When a queue has a single entry left it is repeated.
    """

    def __init__(self, responses: list | None = None, streams: list | None = None):
        self.responses: list[GatewayResponse | AgentryError] = list(responses or [])
        self.streams: list[list[StreamChunk | AgentryError]] = list(streams or [])
        self.calls: list[dict] = []
        self.stream_calls: list[dict] = []
        self.models = ["test-model", "other-model"]

    async def generate(self, model, messages, config=None, tools=None) -> Result[GatewayResponse]:
        self.calls.append(
            {"model": model, "messages": list(messages), "config": config, "tools": tools}
        )
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, AgentryError):
            return Err(item)
        if isinstance(item, Exception):
            raise item
        return Ok(item)

    async def generate_stream(self, model, messages, config=None, tools=None):
        self.stream_calls.append(
            {"model": model, "messages": list(messages), "config": config, "tools": tools}
        )
        chunks = self.streams.pop(0) if len(self.streams) > 1 else self.streams[0]
        for chunk in chunks:
            if isinstance(chunk, AgentryError):
                yield Err(chunk)
            elif isinstance(chunk, Exception):
                raise chunk
            else:
                yield Ok(chunk)

    async def list_models(self) -> Result[list[str]]:
        return Ok(list(self.models))


class EchoTool(BaseTool):
    """Returns its ``text`` argument."""

    def __init__(self):
        self.received: list[dict] = []

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name="echo",
            description="Echo the given text.",
            parameters={
                "type": "object",
                "properties": {"text": {"type": "string"}},
                "required": ["text"],
            },
        )

    async def run(self, args: ToolArgs) -> Result[Any]:
        self.received.append(args)
        return Ok({"echo": args.get("text")})


class FailingTool(BaseTool):
    """Always returns Err."""

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name="failing", description="Always fails.")

    async def run(self, args: ToolArgs) -> Result[Any]:
        return Err(ToolError("boom", tool_name="failing"))


class RaisingTool(BaseTool):
    """Always raises."""

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name="raising", description="Always raises.")

    async def run(self, args: ToolArgs) -> Result[Any]:
        raise RuntimeError("kaboom")


class OpaqueTool(BaseTool):
    """Returns a value json cannot encode."""

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name="opaque", description="Returns an object.")

    async def run(self, args: ToolArgs) -> Result[Any]:
        return Ok(object())
