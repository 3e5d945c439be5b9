"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from .agents import AnyAgent, AsyncDispatcher, Router
from .config import DEFAULT_BATCH_SIZE, llm_model_name, llm_provider_name, resolve_db_path
from .llm import ILlmGateway, LlmBroker, create_gateway
from .logging_config import get_logger
from .models import EventType
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Drop queued events and recorded traces."""
        ...


class Application:
    """Wires storage, tracing, routing, dispatch and the LLM broker.

    Routes can be registered before or after ``start()``. Without an
    explicit gateway one is built from LLM_PROVIDER; if its API key is not
    configured the application runs without a broker.
    """

    def __init__(
        self,
        db_path: str | None = None,
        gateway: ILlmGateway | None = None,
        model: str | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)

        self._storage: IStorage = Storage(self._db_path)
        self._tracker: ITracker = Tracker(self._storage)
        self._router = Router()
        self._dispatcher = AsyncDispatcher(
            self._router, batch_size=batch_size, tracker=self._tracker
        )
        self._gateway = gateway
        self._model = model
        self._broker: LlmBroker | None = None
        self._started = False

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        await self._storage.init()
        logger.info("Storage initialized")

        self._broker = self._build_broker()

        await self._dispatcher.start()
        self._started = True
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        await self._dispatcher.stop()
        if self._started:
            await self._storage.close()
            logger.info("Storage closed")
        self._started = False

    async def reset(self) -> None:
        """Pause dispatch, drop queued events and traces, then resume."""
        await self._dispatcher.stop()

        dropped = self._dispatcher.clear_queue()
        await self._storage.clear()
        logger.info("Storage cleared, %s queued events dropped", dropped)

        await self._dispatcher.start()
        logger.info("Reset complete")

    def register_route(self, event_type: EventType, agent: AnyAgent) -> None:
        self._router.add_route(event_type, agent)

    @property
    def storage(self) -> IStorage:
        if not self._started:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def tracker(self) -> ITracker:
        return self._tracker

    @property
    def router(self) -> Router:
        return self._router

    @property
    def dispatcher(self) -> AsyncDispatcher:
        return self._dispatcher

    @property
    def broker(self) -> LlmBroker:
        if not self._broker:
            raise RuntimeError("LLM broker not configured")
        return self._broker

    def _build_broker(self) -> LlmBroker | None:
        provider = llm_provider_name()
        gateway = self._gateway
        if gateway is None:
            try:
                gateway = create_gateway(provider)
            except ValueError as e:
                logger.warning("LLM broker disabled: %s", e)
                return None

        model = self._model or llm_model_name(provider)
        logger.info("LLM broker initialized with model %s", model)
        return LlmBroker(model, gateway, tracker=self._tracker)
