"""Tests for the HTTP API."""

import httpx
import pytest
import pytest_asyncio

from agentry.api import create_fastapi_app
from agentry.app import Application

from helpers import ScriptedGateway


@pytest_asyncio.fixture
async def application():
    app = Application(db_path=":memory:", gateway=ScriptedGateway())
    await app.start()
    yield app
    await app.stop()


@pytest_asyncio.fixture
async def client(application):
    fastapi_app = create_fastapi_app(application)
    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestTraceEventsRoute:
    """Tests for GET /api/trace-events."""

    @pytest.mark.asyncio
    async def test_empty(self, client):
        """Test that no traces gives an empty list."""
        response = await client.get("/api/trace-events")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_filters(self, client, application):
        """Test filtering by correlation id and event type."""
        await application.tracker.track("llm_call", "llm_broker", {"n": 1}, correlation_id="c1")
        await application.tracker.track("tool_call", "llm_broker", {"n": 2}, correlation_id="c2")

        response = await client.get("/api/trace-events", params={"correlation_id": "c1"})
        body = response.json()
        assert len(body) == 1
        assert body[0]["event_type"] == "llm_call"
        assert body[0]["correlation_id"] == "c1"

        response = await client.get("/api/trace-events", params={"event_type": "tool_call"})
        assert [e["data"] for e in response.json()] == [{"n": 2}]

    @pytest.mark.asyncio
    async def test_invalid_after(self, client):
        """Test that a malformed timestamp is rejected."""
        response = await client.get("/api/trace-events", params={"after": "yesterday"})

        assert response.status_code == 400


class TestControlRoutes:
    """Tests for dispatcher status and control routes."""

    @pytest.mark.asyncio
    async def test_status(self, client):
        """Test the dispatcher status report."""
        response = await client.get("/api/dispatcher/status")

        assert response.status_code == 200
        assert response.json() == {"running": True, "queue_length": 0}

    @pytest.mark.asyncio
    async def test_stop_and_start(self, client, application):
        """Test stopping and restarting the dispatcher."""
        response = await client.post("/api/control/stop")
        assert response.json() == {"status": "ok"}
        assert not application.dispatcher.is_running()

        await client.post("/api/control/start")
        assert application.dispatcher.is_running()

    @pytest.mark.asyncio
    async def test_reset(self, client, application):
        """Test that reset clears traces."""
        await application.tracker.track("llm_call", "llm_broker", {})

        response = await client.post("/api/control/reset")

        assert response.status_code == 200
        assert await application.storage.get_trace_events() == []
