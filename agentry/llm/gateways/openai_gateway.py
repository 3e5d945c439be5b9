"""Gateway implementation for OpenAI and OpenAI-compatible APIs."""

import asyncio
import os
from typing import AsyncIterator

import openai
from openai import AsyncOpenAI

from ...config import (
    LLM_MAX_RETRIES,
    LLM_RETRY_BASE_DELAY_SECONDS,
    LLM_RETRY_MAX_DELAY_SECONDS,
    LLM_RETRYABLE_STATUS_CODES,
)
from ...errors import Err, GatewayError, Ok, Result
from ...logging_config import get_logger
from ...models import (
    CompletionConfig,
    GatewayResponse,
    LlmMessage,
    MessageRole,
    StreamChunk,
    ToolCall,
    Usage,
)
from ..tools import ToolDescriptor

logger = get_logger(__name__)

FINISH_REASONS = {
    "stop": "stop",
    "length": "length",
    "tool_calls": "tool_calls",
    "function_call": "tool_calls",
    "content_filter": "content_filter",
}


class OpenAIGateway:
    """Chat Completions gateway; works with any OpenAI-compatible base URL."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        max_retries: int = LLM_MAX_RETRIES,
        retry_base_delay: float = LLM_RETRY_BASE_DELAY_SECONDS,
    ):
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")

        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        # Retries are handled here so they can be logged.
        self._client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None,
            max_retries=0,
        )

    async def generate(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ToolDescriptor] | None = None,
    ) -> Result[GatewayResponse]:
        """Generate a completion using the Chat Completions API."""
        try:
            response = await self._create_with_retry(
                **self._build_params(model, messages, config, tools)
            )
        except openai.APIStatusError as e:
            return Err(GatewayError(f"OpenAI API error: {e.message}", status_code=e.status_code))
        except openai.APIError as e:
            return Err(GatewayError(f"OpenAI request failed: {e}"))

        if not response.choices:
            return Err(GatewayError("OpenAI response contained no choices"))

        choice = response.choices[0]
        message = choice.message
        tool_calls = [
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "")
            for tc in message.tool_calls or []
        ]

        usage = None
        if response.usage:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return Ok(
            GatewayResponse(
                content=message.content or "",
                tool_calls=tool_calls,
                finish_reason=FINISH_REASONS.get(choice.finish_reason),
                usage=usage,
                model=response.model,
            )
        )

    async def generate_stream(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ToolDescriptor] | None = None,
    ) -> AsyncIterator[Result[StreamChunk]]:
        """Stream a completion; tool-call deltas are accumulated by index."""
        pending: dict[int, dict] = {}
        finish_reason = None

        try:
            stream = await self._create_with_retry(
                stream=True, **self._build_params(model, messages, config, tools)
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                delta = choice.delta

                if delta.content:
                    yield Ok(StreamChunk(content=delta.content))

                for tc in delta.tool_calls or []:
                    entry = pending.setdefault(tc.index, {"id": "", "name": "", "arguments": ""})
                    if tc.id:
                        entry["id"] = tc.id
                    if tc.function:
                        entry["name"] += tc.function.name or ""
                        entry["arguments"] += tc.function.arguments or ""

                if choice.finish_reason:
                    finish_reason = FINISH_REASONS.get(choice.finish_reason)
        except openai.APIStatusError as e:
            yield Err(GatewayError(f"OpenAI API error: {e.message}", status_code=e.status_code))
            return
        except openai.APIError as e:
            yield Err(GatewayError(f"OpenAI stream failed: {e}"))
            return

        tool_calls = [
            ToolCall(id=e["id"], name=e["name"], arguments=e["arguments"])
            for _, e in sorted(pending.items())
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
        except openai.APIError as e:
            return Err(GatewayError(f"Failed to list models: {e}"))
        return Ok([m.id for m in page.data])

    async def _create_with_retry(self, **kwargs):
        """Create a completion, retrying rate limits, 5xx and timeouts."""
        attempt = 0
        while True:
            try:
                return await self._client.chat.completions.create(**kwargs)
            except (openai.APIStatusError, openai.APIConnectionError) as e:
                if not _is_retryable(e) or attempt >= self._max_retries:
                    logger.error("OpenAI request failed after %s attempts: %s", attempt + 1, e)
                    raise
                delay = min(self._retry_base_delay * (2 ** attempt), LLM_RETRY_MAX_DELAY_SECONDS)
                logger.warning(
                    "OpenAI request failed (%s), retrying in %.1fs (attempt %s/%s)",
                    e,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                await asyncio.sleep(delay)
                attempt += 1

    def _build_params(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None,
        tools: list[ToolDescriptor] | None,
    ) -> dict:
        config = config or CompletionConfig()
        params: dict = {
            "model": model,
            "messages": [_convert_message(m) for m in messages],
        }
        if config.temperature is not None:
            params["temperature"] = config.temperature
        if config.max_tokens is not None:
            params["max_tokens"] = config.max_tokens
        if config.top_p is not None:
            params["top_p"] = config.top_p
        if config.frequency_penalty is not None:
            params["frequency_penalty"] = config.frequency_penalty
        if config.presence_penalty is not None:
            params["presence_penalty"] = config.presence_penalty
        if config.stop:
            params["stop"] = config.stop

        response_format = config.response_format
        if response_format and response_format.type == "json_object":
            if response_format.schema:
                params["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {"name": "response", "schema": response_format.schema},
                }
            else:
                params["response_format"] = {"type": "json_object"}

        if tools:
            params["tools"] = [t.to_dict() for t in tools]
            params["tool_choice"] = "auto"
        return params


def _convert_message(message: LlmMessage) -> dict:
    if message.role == MessageRole.TOOL:
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "content": message.text,
        }

    if isinstance(message.content, str):
        content = message.content
    else:
        content = [item.to_dict() for item in message.content]

    converted: dict = {"role": message.role.value, "content": content}
    if message.role == MessageRole.ASSISTANT and message.tool_calls:
        converted["content"] = content or None
        converted["tool_calls"] = [tc.to_dict() for tc in message.tool_calls]
    if message.name and message.role != MessageRole.ASSISTANT:
        converted["name"] = message.name
    return converted


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, openai.APIStatusError):
        return error.status_code in LLM_RETRYABLE_STATUS_CODES
    return isinstance(error, openai.APIConnectionError)
