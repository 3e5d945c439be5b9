"""Tracker implementation for recording TraceEvents."""

import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

from ..logging_config import get_logger
from ..models import LlmMessage, ToolCall, TraceEvent
from ..storage import IStorage

logger = get_logger(__name__)

PREVIEW_CHARS = 100


class ITracker(Protocol):
    """Passive recorder of system interactions. Never affects control flow."""

    async def track(
        self,
        event_type: str,
        actor: str,
        data: dict,
        correlation_id: str | None = None,
    ) -> None:
        """Create TraceEvent and save it."""
        ...

    async def track_llm_call(
        self,
        model: str,
        messages: list[LlmMessage],
        temperature: float | None = None,
        tool_names: list[str] | None = None,
        correlation_id: str | None = None,
    ) -> None:
        ...

    async def track_llm_response(
        self,
        model: str,
        content: str,
        tool_calls: list[ToolCall] | None = None,
        duration_ms: float | None = None,
        correlation_id: str | None = None,
    ) -> None:
        ...

    async def track_tool_call(
        self,
        tool_name: str,
        arguments: dict,
        result: Any,
        caller: str | None = None,
        duration_ms: float | None = None,
        correlation_id: str | None = None,
    ) -> None:
        ...

    async def track_agent_interaction(
        self,
        from_agent: str,
        to_agent: str,
        event_type: str,
        correlation_id: str | None = None,
    ) -> None:
        ...


class Tracker:
    """Creates TraceEvents and saves them to Storage."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def track(
        self,
        event_type: str,
        actor: str,
        data: dict,
        correlation_id: str | None = None,
    ) -> None:
        """Create TraceEvent and save to Storage."""
        trace_event = TraceEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            actor=actor,
            data=data,
            timestamp=datetime.now(timezone.utc),
            correlation_id=correlation_id,
        )
        try:
            await self._storage.save_trace_event(trace_event)
        except Exception as e:
            logger.warning("Failed to record trace event %s: %s", event_type, e)

    async def track_llm_call(
        self,
        model: str,
        messages: list[LlmMessage],
        temperature: float | None = None,
        tool_names: list[str] | None = None,
        correlation_id: str | None = None,
    ) -> None:
        await self.track(
            event_type="llm_call",
            actor="llm_broker",
            data={
                "model": model,
                "message_count": len(messages),
                "temperature": temperature,
                "tools": tool_names or [],
            },
            correlation_id=correlation_id,
        )

    async def track_llm_response(
        self,
        model: str,
        content: str,
        tool_calls: list[ToolCall] | None = None,
        duration_ms: float | None = None,
        correlation_id: str | None = None,
    ) -> None:
        await self.track(
            event_type="llm_response",
            actor="llm_broker",
            data={
                "model": model,
                "content_preview": _preview(content),
                "tool_call_count": len(tool_calls or []),
                "duration_ms": duration_ms,
            },
            correlation_id=correlation_id,
        )

    async def track_tool_call(
        self,
        tool_name: str,
        arguments: dict,
        result: Any,
        caller: str | None = None,
        duration_ms: float | None = None,
        correlation_id: str | None = None,
    ) -> None:
        await self.track(
            event_type="tool_call",
            actor=caller or "llm_broker",
            data={
                "tool_name": tool_name,
                "arguments": arguments,
                "result_preview": _preview(str(result)),
                "duration_ms": duration_ms,
            },
            correlation_id=correlation_id,
        )

    async def track_agent_interaction(
        self,
        from_agent: str,
        to_agent: str,
        event_type: str,
        correlation_id: str | None = None,
    ) -> None:
        await self.track(
            event_type="agent_interaction",
            actor="dispatcher",
            data={
                "from_agent": from_agent,
                "to_agent": to_agent,
                "event_type": event_type,
            },
            correlation_id=correlation_id,
        )


class NullTracker:
    """Tracker that records nothing."""

    async def track(
        self,
        event_type: str,
        actor: str,
        data: dict,
        correlation_id: str | None = None,
    ) -> None:
        return

    async def track_llm_call(self, *args, **kwargs) -> None:
        return

    async def track_llm_response(self, *args, **kwargs) -> None:
        return

    async def track_tool_call(self, *args, **kwargs) -> None:
        return

    async def track_agent_interaction(self, *args, **kwargs) -> None:
        return


def _preview(text: str) -> str:
    if len(text) > PREVIEW_CHARS:
        return text[:PREVIEW_CHARS] + "..."
    return text
