"""LlmBroker: tool-calling and streaming engine on top of a gateway."""

import dataclasses
import json
import time
from typing import Any, AsyncIterator, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import DEFAULT_MAX_TOOL_ITERATIONS
from ..errors import (
    ArgumentParseError,
    Err,
    GatewayError,
    MaxToolIterationsError,
    Ok,
    ParseError,
    Result,
    ToolNotFoundError,
)
from ..logging_config import get_logger
from ..models import CompletionConfig, LlmMessage, ResponseFormat, ToolCall
from ..tracker import ITracker, NullTracker
from .gateway import ILlmGateway
from .tools import ILlmTool

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class LlmBroker:
    """Drives LLM requests, executing requested tools until a final answer.

    Example:
        broker = LlmBroker("claude-3-5-sonnet-20241022", AnthropicGateway())
        result = await broker.generate(
            [LlmMessage.user("What day is it?")],
            tools=[CurrentDateTimeTool()],
        )
    """

    def __init__(
        self,
        model: str,
        gateway: ILlmGateway,
        tracker: ITracker | None = None,
    ):
        self._model = model
        self._gateway = gateway
        self._tracker = tracker or NullTracker()

    @property
    def model(self) -> str:
        return self._model

    @property
    def gateway(self) -> ILlmGateway:
        return self._gateway

    async def generate(
        self,
        messages: list[LlmMessage],
        tools: list[ILlmTool] | None = None,
        config: CompletionConfig | None = None,
        max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS,
        correlation_id: str | None = None,
    ) -> Result[str]:
        """Generate a text response, running tool calls as the model asks.

        Each round trip that ends with tool calls appends the assistant turn
        and one tool turn per call, then asks again. Failures of individual
        tools are reported back to the model as ``{"error": ...}`` payloads.

        Args:
            messages: Conversation history; not modified.
            tools: Tools the model may call.
            config: Completion settings.
            max_tool_iterations: Bound on tool-executing round trips.
            correlation_id: Passed through to trace records.

        Returns:
            Ok with the final text, the gateway's Err, or
            Err(MaxToolIterationsError) when the bound is reached.
        """
        descriptors = [t.descriptor() for t in tools] if tools else None
        history = list(messages)
        iterations = 0

        while iterations < max_tool_iterations:
            await self._tracker.track_llm_call(
                self._model,
                history,
                temperature=config.temperature if config else None,
                tool_names=[d.name for d in descriptors or []],
                correlation_id=correlation_id,
            )
            started = time.perf_counter()
            result = await self._call_gateway(history, config, descriptors, correlation_id)
            if isinstance(result, Err):
                return result

            response = result.value
            await self._tracker.track_llm_response(
                self._model,
                response.content,
                tool_calls=response.tool_calls,
                duration_ms=_elapsed_ms(started),
                correlation_id=correlation_id,
            )

            if not response.tool_calls:
                return Ok(response.content)

            history.append(LlmMessage.assistant(response.content, response.tool_calls))
            await self._execute_tool_calls(response.tool_calls, tools, history, correlation_id)
            iterations += 1

        logger.warning(
            "Tool loop stopped after %s iterations",
            max_tool_iterations,
            extra={"correlation_id": correlation_id},
        )
        return Err(MaxToolIterationsError(max_tool_iterations))

    async def generate_object(
        self,
        messages: list[LlmMessage],
        schema: dict[str, Any] | type[M],
        config: CompletionConfig | None = None,
        correlation_id: str | None = None,
    ) -> Result[Any]:
        """Generate a JSON object conforming to a schema.

        ``schema`` is either a JSON-schema dict, in which case the parsed
        dict is returned, or a pydantic model class, in which case a
        validated instance is returned.
        """
        model_class = schema if isinstance(schema, type) and issubclass(schema, BaseModel) else None
        json_schema = model_class.model_json_schema() if model_class else schema

        object_config = dataclasses.replace(
            config or CompletionConfig(),
            response_format=ResponseFormat(type="json_object", schema=json_schema),
        )

        await self._tracker.track_llm_call(
            self._model,
            messages,
            temperature=object_config.temperature,
            correlation_id=correlation_id,
        )
        started = time.perf_counter()
        result = await self._call_gateway(list(messages), object_config, None, correlation_id)
        if isinstance(result, Err):
            return result

        content = result.value.content
        await self._tracker.track_llm_response(
            self._model,
            content,
            duration_ms=_elapsed_ms(started),
            correlation_id=correlation_id,
        )

        text = _strip_code_fence(content)
        try:
            if model_class:
                return Ok(model_class.model_validate_json(text))
            return Ok(json.loads(text))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(
                "Failed to parse structured response: %s",
                e,
                extra={"correlation_id": correlation_id},
            )
            return Err(ParseError(f"Failed to parse JSON response: {e}"))

    async def generate_stream(
        self,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ILlmTool] | None = None,
        max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS,
        correlation_id: str | None = None,
    ) -> AsyncIterator[Result[str]]:
        """Stream text, running tool calls between provider streams.

        Content is yielded as it arrives. When a provider stream finishes
        with tool calls, the tools run and a new stream starts with the
        updated history. Chunk errors are yielded without ending the stream.
        The tool bound is the same as for ``generate``; reaching it yields
        Err(MaxToolIterationsError) and ends the stream.
        """
        descriptors = [t.descriptor() for t in tools] if tools else None
        history = list(messages)
        iterations = 0

        while iterations < max_tool_iterations:
            await self._tracker.track_llm_call(
                self._model,
                history,
                temperature=config.temperature if config else None,
                tool_names=[d.name for d in descriptors or []],
                correlation_id=correlation_id,
            )
            started = time.perf_counter()
            content_parts: list[str] = []
            pending: list[ToolCall] = []

            stream = self._gateway.generate_stream(self._model, history, config, descriptors)
            while True:
                try:
                    chunk_result = await anext(stream)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    logger.error(
                        "Gateway stream raised: %s",
                        e,
                        exc_info=True,
                        extra={"correlation_id": correlation_id},
                    )
                    yield Err(GatewayError(f"Failed to generate: {e}"))
                    return

                if isinstance(chunk_result, Err):
                    yield chunk_result
                    continue
                chunk = chunk_result.value
                if chunk.content:
                    content_parts.append(chunk.content)
                    yield Ok(chunk.content)
                if chunk.tool_calls:
                    pending.extend(chunk.tool_calls)

            content = "".join(content_parts)
            await self._tracker.track_llm_response(
                self._model,
                content,
                tool_calls=pending,
                duration_ms=_elapsed_ms(started),
                correlation_id=correlation_id,
            )

            if not pending:
                return

            history.append(LlmMessage.assistant(content, pending))
            await self._execute_tool_calls(pending, tools, history, correlation_id)
            iterations += 1

        logger.warning(
            "Streaming tool loop stopped after %s iterations",
            max_tool_iterations,
            extra={"correlation_id": correlation_id},
        )
        yield Err(MaxToolIterationsError(max_tool_iterations))

    async def list_models(self) -> Result[list[str]]:
        """Models offered by the gateway."""
        return await self._gateway.list_models()

    async def _call_gateway(
        self,
        history: list[LlmMessage],
        config: CompletionConfig | None,
        descriptors: list | None,
        correlation_id: str | None,
    ) -> Result:
        """One gateway round trip; a raised fault becomes a GatewayError."""
        try:
            result = await self._gateway.generate(self._model, history, config, descriptors)
        except Exception as e:
            logger.error(
                "Gateway raised: %s",
                e,
                exc_info=True,
                extra={"correlation_id": correlation_id},
            )
            return Err(GatewayError(f"Failed to generate: {e}"))
        if isinstance(result, Err):
            logger.error(
                "Gateway call failed: %s",
                result.error,
                extra={"correlation_id": correlation_id},
            )
        return result

    async def _execute_tool_calls(
        self,
        tool_calls: list[ToolCall],
        tools: list[ILlmTool] | None,
        history: list[LlmMessage],
        correlation_id: str | None,
    ) -> None:
        """Run each call and append its tool turn; never raises."""
        by_name = {t.name: t for t in tools or []}
        for call in tool_calls:
            started = time.perf_counter()
            arguments: dict = {}
            tool = by_name.get(call.name)
            if tool is None:
                payload = _error_payload(ToolNotFoundError(call.name).message)
            else:
                try:
                    arguments = call.parse_arguments()
                except ValueError as e:
                    error = ArgumentParseError(
                        f"Invalid arguments for {call.name}: {e}", tool_name=call.name
                    )
                    payload = _error_payload(error.message)
                else:
                    payload = await self._run_tool(tool, call, arguments, correlation_id)

            await self._tracker.track_tool_call(
                call.name,
                arguments,
                payload,
                duration_ms=_elapsed_ms(started),
                correlation_id=correlation_id,
            )
            history.append(LlmMessage.tool(payload, call.id, call.name))

    async def _run_tool(
        self,
        tool: ILlmTool,
        call: ToolCall,
        arguments: dict,
        correlation_id: str | None,
    ) -> str:
        try:
            result = await tool.run(arguments)
        except Exception as e:
            logger.error(
                "Tool %s raised: %s",
                call.name,
                e,
                exc_info=True,
                extra={"correlation_id": correlation_id},
            )
            return _error_payload(str(e))

        if isinstance(result, Err):
            logger.warning(
                "Tool %s failed: %s",
                call.name,
                result.error,
                extra={"correlation_id": correlation_id},
            )
            return _error_payload(str(result.error))

        try:
            return json.dumps(result.value)
        except (TypeError, ValueError) as e:
            return _error_payload(f"Tool {call.name} returned an unserializable result: {e}")


def _error_payload(message: str) -> str:
    return json.dumps({"error": message})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json fence some models add."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()
