"""Control API routes."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...app import Application


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class DispatcherStatusResponse(BaseModel):
    """Response model for dispatcher state."""

    running: bool
    queue_length: int


def create_control_router(app: Application) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api", tags=["control"])

    @router.get("/dispatcher/status", response_model=DispatcherStatusResponse)
    async def dispatcher_status() -> dict:
        """Report whether the dispatcher runs and how many events are queued."""
        return {
            "running": app.dispatcher.is_running(),
            "queue_length": app.dispatcher.get_queue_length(),
        }

    @router.post("/control/start", response_model=StatusResponse)
    async def start_dispatcher() -> dict:
        """Start the dispatch loop."""
        await app.dispatcher.start()
        return {"status": "ok"}

    @router.post("/control/stop", response_model=StatusResponse)
    async def stop_dispatcher() -> dict:
        """Stop the dispatch loop after the current batch."""
        await app.dispatcher.stop()
        return {"status": "ok"}

    @router.post("/control/reset", response_model=StatusResponse)
    async def reset_system() -> dict:
        """Drop queued events and recorded traces."""
        try:
            await app.reset()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
