"""Tests for Application."""

from dataclasses import dataclass
from unittest.mock import patch

import pytest
import pytest_asyncio

from agentry.app import Application
from agentry.errors import Ok
from agentry.models import Event

from helpers import ScriptedGateway


@dataclass(kw_only=True)
class JobEvent(Event):
    name: str = ""


class JobAgent:
    def __init__(self):
        self.seen = []

    async def receive_event_async(self, event):
        self.seen.append(event)
        return Ok([])


@pytest_asyncio.fixture
async def application():
    app = Application(db_path=":memory:", gateway=ScriptedGateway(), model="test-model")
    await app.start()
    yield app
    await app.stop()


class TestApplicationStart:
    """Tests for Application.start()."""

    @pytest.mark.asyncio
    async def test_start_initializes_components(self, application):
        """Test that start initializes all components."""
        assert application.dispatcher.is_running()
        assert application.broker.model == "test-model"
        assert await application.storage.get_trace_events() == []

    @pytest.mark.asyncio
    async def test_storage_before_start(self):
        """Test that storage is unavailable before start."""
        app = Application(db_path=":memory:")
        with pytest.raises(RuntimeError):
            app.storage

    @pytest.mark.asyncio
    async def test_without_api_key_broker_disabled(self, monkeypatch):
        """Test that a missing API key disables the broker instead of failing."""
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        app = Application(db_path=":memory:")
        await app.start()

        with pytest.raises(RuntimeError):
            app.broker
        await app.stop()

    @pytest.mark.asyncio
    async def test_gateway_from_environment(self, monkeypatch):
        """Test that the provider and model come from the environment."""
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("LLM_MODEL", "gpt-custom")
        monkeypatch.setenv("OPENAI_API_KEY", "test_key")

        with patch("agentry.llm.gateways.openai_gateway.AsyncOpenAI"):
            app = Application(db_path=":memory:")
            await app.start()

        assert app.broker.model == "gpt-custom"
        await app.stop()


class TestApplicationRouting:
    """Tests for routing through the application."""

    @pytest.mark.asyncio
    async def test_register_route_and_dispatch(self, application):
        """Test that registered agents receive dispatched events."""
        agent = JobAgent()
        application.register_route(JobEvent, agent)

        application.dispatcher.dispatch(JobEvent(source="test", name="build"))
        await application.dispatcher.wait_for_empty_queue(timeout=2)

        assert [e.name for e in agent.seen] == ["build"]
        traces = await application.storage.get_trace_events(event_types=["agent_interaction"])
        assert len(traces) == 1


class TestApplicationReset:
    """Tests for Application.reset()."""

    @pytest.mark.asyncio
    async def test_reset_clears_queue_and_traces(self, application):
        """Test that reset drops queued events and recorded traces."""
        await application.dispatcher.stop()
        application.dispatcher.dispatch(JobEvent(source="test"))
        await application.tracker.track("x", "y", {})

        await application.reset()

        assert application.dispatcher.get_queue_length() == 0
        assert application.dispatcher.is_running()
        assert await application.storage.get_trace_events() == []
