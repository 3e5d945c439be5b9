"""Tests for Tracker."""

from unittest.mock import AsyncMock, Mock

import pytest

from agentry.models import LlmMessage, ToolCall
from agentry.tracker import NullTracker, Tracker


class TestTrackerTrack:
    """Tests for Tracker.track() method."""

    @pytest.mark.asyncio
    async def test_track_creates_event(self, tracker, storage):
        """Test that track() creates a TraceEvent."""
        await tracker.track(
            event_type="test_event",
            actor="test_actor",
            data={"key": "value"},
            correlation_id="c1",
        )

        events = await storage.get_trace_events()
        assert len(events) == 1
        assert events[0].event_type == "test_event"
        assert events[0].actor == "test_actor"
        assert events[0].data == {"key": "value"}
        assert events[0].correlation_id == "c1"
        assert events[0].id
        assert events[0].timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_track_multiple_events(self, tracker, storage):
        """Test tracking several events."""
        for i in range(3):
            await tracker.track(event_type=f"event_{i}", actor="test", data={})

        events = await storage.get_trace_events()
        assert len(events) == 3

    @pytest.mark.asyncio
    async def test_storage_failure_is_swallowed(self):
        """Test that a storage failure never reaches the caller."""
        failing_storage = Mock()
        failing_storage.save_trace_event = AsyncMock(side_effect=RuntimeError("disk full"))

        await Tracker(failing_storage).track(event_type="x", actor="y", data={})

        failing_storage.save_trace_event.assert_called_once()


class TestTrackerHelpers:
    """Tests for the typed tracking helpers."""

    @pytest.mark.asyncio
    async def test_track_llm_call(self, tracker, storage):
        """Test the llm_call record."""
        await tracker.track_llm_call(
            "model-x",
            [LlmMessage.system("s"), LlmMessage.user("u")],
            temperature=0.7,
            tool_names=["echo"],
        )

        event = (await storage.get_trace_events())[0]
        assert event.event_type == "llm_call"
        assert event.actor == "llm_broker"
        assert event.data == {
            "model": "model-x",
            "message_count": 2,
            "temperature": 0.7,
            "tools": ["echo"],
        }

    @pytest.mark.asyncio
    async def test_track_llm_response_truncates_preview(self, tracker, storage):
        """Test that long content is previewed."""
        await tracker.track_llm_response(
            "model-x",
            "x" * 500,
            tool_calls=[ToolCall(id="1", name="echo", arguments="{}")],
        )

        event = (await storage.get_trace_events())[0]
        assert event.data["content_preview"] == "x" * 100 + "..."
        assert event.data["tool_call_count"] == 1

    @pytest.mark.asyncio
    async def test_track_tool_call(self, tracker, storage):
        """Test the tool_call record."""
        await tracker.track_tool_call("echo", {"text": "hi"}, '{"echo": "hi"}', duration_ms=1.5)

        event = (await storage.get_trace_events(event_types=["tool_call"]))[0]
        assert event.data["tool_name"] == "echo"
        assert event.data["arguments"] == {"text": "hi"}
        assert event.data["duration_ms"] == 1.5

    @pytest.mark.asyncio
    async def test_track_agent_interaction(self, tracker, storage):
        """Test the agent_interaction record."""
        await tracker.track_agent_interaction("caller", "PingAgent", "PingEvent", "c1")

        event = (await storage.get_trace_events(actor="dispatcher"))[0]
        assert event.data == {
            "from_agent": "caller",
            "to_agent": "PingAgent",
            "event_type": "PingEvent",
        }


class TestNullTracker:
    """Tests for NullTracker."""

    @pytest.mark.asyncio
    async def test_accepts_everything(self):
        """Test that every method is a no-op."""
        tracker = NullTracker()
        await tracker.track("x", "y", {})
        await tracker.track_llm_call("m", [])
        await tracker.track_llm_response("m", "c")
        await tracker.track_tool_call("t", {}, None)
        await tracker.track_agent_interaction("a", "b", "E")
