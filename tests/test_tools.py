"""Tests for tools."""

from datetime import datetime, timezone

import pytest

from agentry.errors import Err, Ok, ToolError
from agentry.llm import CurrentDateTimeTool, LlmAgent, LlmBroker, ToolDescriptor, ToolWrapper

from helpers import ScriptedGateway, text_response


class TestToolDescriptor:
    """Tests for ToolDescriptor."""

    def test_to_dict(self):
        """Test the function-calling representation."""
        descriptor = ToolDescriptor(name="lookup", description="Look things up")

        assert descriptor.to_dict() == {
            "type": "function",
            "function": {
                "name": "lookup",
                "description": "Look things up",
                "parameters": {"type": "object", "properties": {}},
            },
        }


class TestCurrentDateTimeTool:
    """Tests for CurrentDateTimeTool."""

    def test_name_from_descriptor(self):
        """Test that the tool name comes from its descriptor."""
        assert CurrentDateTimeTool().name == "get_current_datetime"

    @pytest.mark.asyncio
    async def test_run(self):
        """Test the reported date and time."""
        fixed = datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)
        tool = CurrentDateTimeTool(clock=lambda: fixed)

        result = await tool.run({"format_string": "%A"})

        assert isinstance(result, Ok)
        assert result.value["current_datetime"] == "2024-05-17T09:30:00+00:00"
        assert result.value["timezone"] == "UTC"
        assert result.value["formatted"] == "Friday"


class TestToolWrapper:
    """Tests for ToolWrapper."""

    def make_wrapper(self, responses):
        gateway = ScriptedGateway(responses)
        agent = LlmAgent(LlmBroker("m", gateway), behaviour="You are a historian.")
        return ToolWrapper(agent, "ask_historian", "Ask the historian"), gateway

    def test_descriptor(self):
        """Test that the wrapper takes a single input argument."""
        wrapper, _ = self.make_wrapper([text_response("x")])
        descriptor = wrapper.descriptor()

        assert descriptor.name == "ask_historian"
        assert descriptor.parameters["required"] == ["input"]

    @pytest.mark.asyncio
    async def test_delegates_to_agent(self):
        """Test that the input becomes the agent's user message."""
        wrapper, gateway = self.make_wrapper([text_response("In 1066.")])

        result = await wrapper.run({"input": "When was Hastings?"})

        assert result == Ok("In 1066.")
        sent = gateway.calls[0]["messages"]
        assert sent[0].content == "You are a historian."
        assert sent[1].content == "When was Hastings?"

    @pytest.mark.asyncio
    async def test_missing_input(self):
        """Test that a missing input is a tool error."""
        wrapper, gateway = self.make_wrapper([text_response("x")])

        result = await wrapper.run({})

        assert isinstance(result.error, ToolError)
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_agent_failure(self):
        """Test that the agent's failure becomes the tool's error."""
        from agentry.errors import GatewayError

        wrapper, _ = self.make_wrapper([GatewayError("down")])

        result = await wrapper.run({"input": "Hi"})

        assert isinstance(result, Err)
        assert isinstance(result.error, ToolError)
        assert result.error.message == "down"
