"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability record."""

    id: str
    event_type: str  # e.g. "llm_call", "tool_call", "agent_interaction"
    actor: str  # who created this event
    data: dict  # self-contained data for display
    timestamp: datetime
    correlation_id: str | None = None
