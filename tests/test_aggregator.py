"""Tests for AsyncAggregatorAgent."""

import asyncio
from dataclasses import dataclass

import pytest

from agentry.agents import AsyncAggregatorAgent
from agentry.errors import Err, MissingCorrelationIdError, Ok, TimeoutExceededError
from agentry.models import Event


@dataclass(kw_only=True)
class AnswerEvent(Event):
    text: str = ""


@dataclass(kw_only=True)
class FactCheckEvent(Event):
    verdict: str = ""


@dataclass(kw_only=True)
class FinalEvent(Event):
    summary: str = ""


class FinalAnswerAgent(AsyncAggregatorAgent):
    """Combines an answer with its fact check."""

    def __init__(self):
        super().__init__([AnswerEvent, FactCheckEvent])
        self.processed: list[list[Event]] = []

    async def process_events(self, events):
        self.processed.append(events)
        answer = next(e for e in events if isinstance(e, AnswerEvent))
        check = next(e for e in events if isinstance(e, FactCheckEvent))
        return Ok(
            [
                FinalEvent(
                    source="final_answer_agent",
                    correlation_id=answer.correlation_id,
                    summary=f"{answer.text} ({check.verdict})",
                )
            ]
        )


class TestReceiveEvent:
    """Tests for AsyncAggregatorAgent.receive_event_async()."""

    @pytest.mark.asyncio
    async def test_missing_correlation_id(self):
        """Test that an event without correlation id is rejected."""
        agent = FinalAnswerAgent()
        result = await agent.receive_event_async(AnswerEvent(source="test"))

        assert isinstance(result, Err)
        assert isinstance(result.error, MissingCorrelationIdError)

    @pytest.mark.asyncio
    async def test_partial_set_waits(self):
        """Test that one of two needed types does not trigger processing."""
        agent = FinalAnswerAgent()
        result = await agent.receive_event_async(
            AnswerEvent(source="test", correlation_id="c1", text="42")
        )

        assert result == Ok([])
        assert agent.processed == []
        assert len(agent.pending("c1")) == 1

    @pytest.mark.asyncio
    async def test_complete_set_processes_once(self):
        """Test that the second needed type triggers processing exactly once."""
        agent = FinalAnswerAgent()
        await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1", text="42"))
        result = await agent.receive_event_async(
            FactCheckEvent(source="b", correlation_id="c1", verdict="verified")
        )

        assert isinstance(result, Ok)
        assert result.value[0].summary == "42 (verified)"
        assert len(agent.processed) == 1
        assert {e.type for e in agent.processed[0]} == {"AnswerEvent", "FactCheckEvent"}
        assert agent.pending("c1") == []

    @pytest.mark.asyncio
    async def test_order_independent(self):
        """Test that arrival order does not matter."""
        agent = FinalAnswerAgent()
        await agent.receive_event_async(FactCheckEvent(source="b", correlation_id="c1"))
        result = await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1"))

        assert len(result.value) == 1
        assert len(agent.processed) == 1

    @pytest.mark.asyncio
    async def test_duplicates_are_kept(self):
        """Test that duplicate types are accumulated and handed over."""
        agent = FinalAnswerAgent()
        await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1", text="1"))
        await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1", text="2"))
        await agent.receive_event_async(FactCheckEvent(source="b", correlation_id="c1"))

        assert len(agent.processed[0]) == 3

    @pytest.mark.asyncio
    async def test_correlation_ids_are_independent(self):
        """Test that accumulations for different ids do not mix."""
        agent = FinalAnswerAgent()
        await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1"))
        result = await agent.receive_event_async(FactCheckEvent(source="b", correlation_id="c2"))

        assert result == Ok([])
        assert len(agent.pending("c1")) == 1
        assert len(agent.pending("c2")) == 1

    @pytest.mark.asyncio
    async def test_type_names_accepted(self):
        """Test that needed types can be given by name."""

        class NamedAggregator(AsyncAggregatorAgent):
            async def process_events(self, events):
                return Ok([])

        agent = NamedAggregator(["AnswerEvent"])
        assert agent.event_types_needed == ["AnswerEvent"]


class TestWaitForEvents:
    """Tests for AsyncAggregatorAgent.wait_for_events()."""

    @pytest.mark.asyncio
    async def test_wait_returns_when_quorum_met(self):
        """Test that a waiter is released with the complete set."""
        agent = FinalAnswerAgent()
        waiter = asyncio.create_task(agent.wait_for_events("c1", timeout=1))
        await asyncio.sleep(0)

        await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1"))
        await agent.receive_event_async(FactCheckEvent(source="b", correlation_id="c1"))

        result = await waiter
        assert isinstance(result, Ok)
        assert len(result.value) == 2

    @pytest.mark.asyncio
    async def test_wait_times_out(self):
        """Test that an incomplete set times out with an error."""
        agent = FinalAnswerAgent()
        await agent.receive_event_async(AnswerEvent(source="a", correlation_id="c1"))

        result = await agent.wait_for_events("c1", timeout=0.01)

        assert isinstance(result, Err)
        assert isinstance(result.error, TimeoutExceededError)
        assert len(agent.pending("c1")) == 1


class TestWithDispatcher:
    """Aggregator driven by the dispatcher."""

    @pytest.mark.asyncio
    async def test_fan_in(self, dispatcher, router):
        """Test that two branches of one request are combined."""
        agent = FinalAnswerAgent()
        router.add_route(AnswerEvent, agent)
        router.add_route(FactCheckEvent, agent)

        dispatcher.dispatch(AnswerEvent(source="a", correlation_id="req", text="Paris"))
        dispatcher.dispatch(FactCheckEvent(source="b", correlation_id="req", verdict="ok"))
        await dispatcher.start()
        await dispatcher.wait_for_empty_queue(timeout=2)

        assert len(agent.processed) == 1
        assert agent.pending("req") == []
