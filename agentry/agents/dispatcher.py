"""AsyncDispatcher implementation: queued, batched event processing loop."""

import asyncio
import dataclasses
from collections import deque
from typing import Callable, Protocol

from ..config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_IDLE_DELAY_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
)
from ..errors import Err, Ok, Result, TimeoutExceededError, ValidationError
from ..logging_config import get_logger
from ..models import Event, TerminateEvent, new_correlation_id
from ..tracker import ITracker, NullTracker
from .base import AnyAgent, IAsyncAgent, agent_name
from .router import Router

logger = get_logger(__name__)


IdGenerator = Callable[[], str]


class IDispatcher(Protocol):
    """Queue of pending events drained by a background loop."""

    def dispatch(self, event: Event) -> Event:
        """Enqueue an event, assigning a correlation id if missing."""
        ...

    async def start(self) -> "IDispatcher":
        """Launch the background drain loop."""
        ...

    async def stop(self) -> None:
        """Stop after the current batch and wait for the loop to exit."""
        ...

    async def wait_for_empty_queue(self, timeout: float | None = None) -> Result[bool]:
        """Wait until the queue is drained."""
        ...

    def get_queue_length(self) -> int:
        ...

    def is_running(self) -> bool:
        ...


class AsyncDispatcher:
    """Routes queued events to agents in bounded batches.

    Each batch takes at most ``batch_size`` events that were already queued
    when the batch began; events emitted by agents while the batch runs are
    appended to the tail and wait for a later batch. Agents for one event run
    sequentially in router order, and a failing agent never stops the loop.
    """

    def __init__(
        self,
        router: Router,
        batch_size: int = DEFAULT_BATCH_SIZE,
        idle_delay: float = DEFAULT_IDLE_DELAY_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        id_generator: IdGenerator = new_correlation_id,
        tracker: ITracker | None = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._router = router
        self._batch_size = batch_size
        self._idle_delay = idle_delay
        self._poll_interval = poll_interval
        self._id_generator = id_generator
        self._tracker = tracker or NullTracker()

        self._queue: deque[Event] = deque()
        self._stop_flag = False
        self._loop_task: asyncio.Task | None = None
        self._in_flight: Event | None = None

    async def start(self) -> "AsyncDispatcher":
        """Start the background processing loop."""
        self._stop_flag = False
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self._dispatch_events_loop())
            logger.info("Dispatcher started (batch_size=%s)", self._batch_size)
        return self

    async def stop(self) -> None:
        """Stop the loop once the current batch has been processed."""
        self._stop_flag = True
        if self._loop_task:
            await self._loop_task
            self._loop_task = None
            logger.info("Dispatcher stopped with %s queued events", len(self._queue))

    def dispatch(self, event: Event) -> Event:
        """Append an event to the queue tail and return the queued event.

        An event without a correlation id is queued as a copy carrying a
        freshly generated one; the caller's object is left untouched.
        """
        if not event.correlation_id:
            event = dataclasses.replace(event, correlation_id=self._id_generator())
        self._queue.append(event)
        logger.debug(
            "Dispatched %s from %s",
            event.type,
            event.source,
            extra={"correlation_id": event.correlation_id},
        )
        return event

    async def wait_for_empty_queue(self, timeout: float | None = None) -> Result[bool]:
        """Poll until the queue is empty and no event is being processed.

        Args:
            timeout: Seconds to wait before giving up. None waits forever.

        Returns:
            Ok(True) once drained, Err(TimeoutExceededError) on timeout.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        while self._queue or self._in_flight is not None:
            if timeout is not None and loop.time() - started > timeout:
                return Err(
                    TimeoutExceededError(
                        f"Timeout waiting for empty queue ({timeout}s), "
                        f"{len(self._queue)} events pending",
                        timeout=timeout,
                    )
                )
            await asyncio.sleep(self._poll_interval)
        return Ok(True)

    def get_queue_length(self) -> int:
        """Number of queued events."""
        return len(self._queue)

    def clear_queue(self) -> int:
        """Drop all queued events; returns how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        return dropped

    def is_running(self) -> bool:
        """True while the processing loop is active and not asked to stop."""
        return (
            not self._stop_flag
            and self._loop_task is not None
            and not self._loop_task.done()
        )

    async def _dispatch_events_loop(self) -> None:
        """Drain the queue in batches until stopped or terminated."""
        while not self._stop_flag:
            batch = min(self._batch_size, len(self._queue))
            for _ in range(batch):
                event = self._queue.popleft()

                if isinstance(event, TerminateEvent):
                    logger.info(
                        "Terminate event from %s received",
                        event.source,
                        extra={"correlation_id": event.correlation_id},
                    )
                    self._stop_flag = True
                    break

                self._in_flight = event
                try:
                    await self._process_event(event)
                finally:
                    self._in_flight = None

            await asyncio.sleep(self._idle_delay)

    async def _process_event(self, event: Event) -> None:
        """Hand an event to each routed agent in turn."""
        for agent in self._router.get_agents(event):
            name = agent_name(agent)
            try:
                result = await self._invoke(agent, event)
            except Exception as e:
                logger.error(
                    "Unexpected error in agent %s handling %s: %s",
                    name,
                    event.type,
                    e,
                    exc_info=True,
                    extra={"correlation_id": event.correlation_id},
                )
                await self._tracker.track(
                    "agent_failed",
                    name,
                    {"event_type": event.type, "error": str(e)},
                    correlation_id=event.correlation_id,
                )
                continue

            if isinstance(result, Err):
                logger.error(
                    "Agent %s failed handling %s: %s",
                    name,
                    event.type,
                    result.error,
                    extra={"correlation_id": event.correlation_id},
                )
                await self._tracker.track(
                    "agent_failed",
                    name,
                    {"event_type": event.type, "error": str(result.error)},
                    correlation_id=event.correlation_id,
                )
                continue

            await self._tracker.track_agent_interaction(
                from_agent=event.source,
                to_agent=name,
                event_type=event.type,
                correlation_id=event.correlation_id,
            )
            for new_event in result.value:
                if not new_event.correlation_id:
                    new_event = dataclasses.replace(
                        new_event, correlation_id=event.correlation_id
                    )
                self.dispatch(new_event)

    async def _invoke(self, agent: AnyAgent, event: Event) -> Result[list[Event]]:
        if isinstance(agent, IAsyncAgent):
            result = await agent.receive_event_async(event)
        else:
            result = Ok(agent.receive_event(event))
        if not isinstance(result, (Ok, Err)):
            return Err(
                ValidationError(
                    f"Agent returned {type(result).__name__} instead of a Result"
                )
            )
        if isinstance(result, Ok):
            emitted = result.value
            if not isinstance(emitted, list) or not all(isinstance(e, Event) for e in emitted):
                return Err(
                    ValidationError(
                        f"Agent returned {type(emitted).__name__} instead of a list of events"
                    )
                )
        return result
