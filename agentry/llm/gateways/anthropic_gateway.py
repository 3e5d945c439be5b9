"""Gateway implementation using the Anthropic Claude API."""

import json
import os
from typing import AsyncIterator

import anthropic

from ...config import DEFAULT_MAX_TOKENS
from ...errors import Err, GatewayError, Ok, Result
from ...logging_config import get_logger
from ...models import (
    CompletionConfig,
    ContentItem,
    GatewayResponse,
    LlmMessage,
    MessageRole,
    StreamChunk,
    ToolCall,
    Usage,
)
from ..tools import ToolDescriptor

logger = get_logger(__name__)

JSON_INSTRUCTION = "Respond only with a single valid JSON object and no other text."

STOP_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_calls",
}


class AnthropicGateway:
    """Anthropic Claude API gateway."""

    def __init__(self, api_key: str | None = None):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    async def generate(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ToolDescriptor] | None = None,
    ) -> Result[GatewayResponse]:
        """Generate a completion using the Messages API."""
        params = self._build_params(model, messages, config, tools)
        try:
            response = await self._client.messages.create(**params)
        except anthropic.APIStatusError as e:
            logger.error("Anthropic API error %s: %s", e.status_code, e.message)
            return Err(GatewayError(f"Anthropic API error: {e.message}", status_code=e.status_code))
        except anthropic.APIError as e:
            logger.error("Anthropic request failed: %s", e)
            return Err(GatewayError(f"Anthropic request failed: {e}"))

        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCall(id=block.id, name=block.name, arguments=json.dumps(block.input))
                )

        usage = None
        if getattr(response, "usage", None):
            usage = Usage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            )

        return Ok(
            GatewayResponse(
                content="".join(text_parts),
                tool_calls=tool_calls,
                finish_reason=STOP_REASONS.get(response.stop_reason),
                usage=usage,
                model=getattr(response, "model", model),
            )
        )

    async def generate_stream(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ToolDescriptor] | None = None,
    ) -> AsyncIterator[Result[StreamChunk]]:
        """Stream a completion; tool input fragments are joined per content block."""
        params = self._build_params(model, messages, config, tools)
        tool_blocks: dict[int, dict] = {}
        finish_reason = None

        try:
            stream = await self._client.messages.create(stream=True, **params)
            async for event in stream:
                if event.type == "content_block_start":
                    block = event.content_block
                    if block.type == "tool_use":
                        tool_blocks[event.index] = {"id": block.id, "name": block.name, "json": ""}
                elif event.type == "content_block_delta":
                    delta = event.delta
                    if delta.type == "text_delta" and delta.text:
                        yield Ok(StreamChunk(content=delta.text))
                    elif delta.type == "input_json_delta" and event.index in tool_blocks:
                        tool_blocks[event.index]["json"] += delta.partial_json
                elif event.type == "message_delta":
                    finish_reason = STOP_REASONS.get(event.delta.stop_reason, finish_reason)
        except anthropic.APIStatusError as e:
            logger.error("Anthropic stream error %s: %s", e.status_code, e.message)
            yield Err(GatewayError(f"Anthropic API error: {e.message}", status_code=e.status_code))
            return
        except anthropic.APIError as e:
            logger.error("Anthropic stream failed: %s", e)
            yield Err(GatewayError(f"Anthropic request failed: {e}"))
            return

        tool_calls = [
            ToolCall(id=b["id"], name=b["name"], arguments=b["json"])
            for _, b in sorted(tool_blocks.items())
        ]
        yield Ok(
            StreamChunk(
                tool_calls=tool_calls or None,
                finish_reason=finish_reason,
                done=True,
            )
        )

    async def list_models(self) -> Result[list[str]]:
        try:
            page = await self._client.models.list()
        except anthropic.APIError as e:
            return Err(GatewayError(f"Failed to list models: {e}"))
        return Ok([m.id for m in page.data])

    def _build_params(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None,
        tools: list[ToolDescriptor] | None,
    ) -> dict:
        config = config or CompletionConfig()
        system_parts = [m.text for m in messages if m.role == MessageRole.SYSTEM]
        if config.response_format and config.response_format.type == "json_object":
            instruction = JSON_INSTRUCTION
            if config.response_format.schema:
                instruction += (
                    " The object must conform to this JSON schema:\n"
                    + json.dumps(config.response_format.schema)
                )
            system_parts.append(instruction)

        params: dict = {
            "model": model,
            "messages": _convert_messages(messages),
            "max_tokens": config.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if system_parts:
            params["system"] = "\n\n".join(system_parts)
        if config.temperature is not None:
            params["temperature"] = config.temperature
        if config.top_p is not None:
            params["top_p"] = config.top_p
        if config.top_k is not None:
            params["top_k"] = config.top_k
        if config.stop:
            params["stop_sequences"] = config.stop
        if tools:
            params["tools"] = [
                {
                    "name": t.name,
                    "description": t.description,
                    "input_schema": t.parameters,
                }
                for t in tools
            ]
        return params


def _convert_messages(messages: list[LlmMessage]) -> list[dict]:
    """Convert to Anthropic format.

    Tool results are user turns holding tool_result blocks; consecutive
    results are merged into one turn.
    """
    converted: list[dict] = []
    for message in messages:
        if message.role == MessageRole.SYSTEM:
            continue

        if message.role == MessageRole.TOOL:
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.text,
            }
            previous = converted[-1] if converted else None
            if (
                previous
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
                and previous["content"]
                and previous["content"][0].get("type") == "tool_result"
            ):
                previous["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
            continue

        if message.role == MessageRole.ASSISTANT and message.tool_calls:
            blocks: list[dict] = []
            if message.text:
                blocks.append({"type": "text", "text": message.text})
            for call in message.tool_calls:
                try:
                    tool_input = call.parse_arguments()
                except ValueError:
                    tool_input = {}
                blocks.append(
                    {"type": "tool_use", "id": call.id, "name": call.name, "input": tool_input}
                )
            converted.append({"role": "assistant", "content": blocks})
            continue

        role = "assistant" if message.role == MessageRole.ASSISTANT else "user"
        if isinstance(message.content, str):
            converted.append({"role": role, "content": message.content})
        else:
            converted.append({"role": role, "content": [_content_block(i) for i in message.content]})
    return converted


def _content_block(item: ContentItem) -> dict:
    if item.type == "text":
        return {"type": "text", "text": item.text or ""}

    url = item.image_url or ""
    if url.startswith("data:") and ";base64," in url:
        header, data = url.split(",", 1)
        media_type = header[len("data:"):].split(";", 1)[0]
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": media_type, "data": data},
        }
    return {"type": "image", "source": {"type": "url", "url": url}}
