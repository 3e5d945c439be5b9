"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root and the tests directory (for helpers) to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from agentry.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def tracker(storage):
    """Create Tracker backed by in-memory storage."""
    from agentry.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def router():
    """Create an empty Router."""
    from agentry.agents import Router

    return Router()


@pytest_asyncio.fixture
async def dispatcher(router, tracker):
    """Create a fast-cycling dispatcher; stopped after the test."""
    from agentry.agents import AsyncDispatcher

    d = AsyncDispatcher(router, idle_delay=0.001, poll_interval=0.001, tracker=tracker)
    yield d
    await d.stop()


@pytest.fixture
def gateway():
    """Create a scripted gateway with no responses queued."""
    from helpers import ScriptedGateway

    return ScriptedGateway()


@pytest.fixture
def broker(gateway, tracker):
    """Create a broker over the scripted gateway."""
    from agentry.llm import LlmBroker

    return LlmBroker("test-model", gateway, tracker=tracker)


@pytest.fixture
def echo_tool():
    """Create a tool echoing its text argument."""
    from helpers import EchoTool

    return EchoTool()
