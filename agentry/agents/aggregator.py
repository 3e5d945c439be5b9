"""AsyncAggregatorAgent: collects related events until a quorum is met."""

import asyncio
from abc import ABC, abstractmethod

from ..errors import Err, MissingCorrelationIdError, Ok, Result, TimeoutExceededError
from ..logging_config import get_logger
from ..models import Event, EventType, event_type_name

logger = get_logger(__name__)


class _QuorumWaiter:
    """Wait/notify point for one correlation id."""

    def __init__(self):
        self.ready = asyncio.Event()
        self.events: list[Event] = []

    def notify(self, events: list[Event]) -> None:
        self.events = list(events)
        self.ready.set()


class AsyncAggregatorAgent(ABC):
    """Base class for agents that combine several events before acting.

    Events are accumulated per correlation id until at least one event of
    every needed type has arrived; the accumulation is then removed and
    handed to ``process_events``. Until then ``receive_event_async`` returns
    Ok([]).

    Example:
        class FinalAnswerAgent(AsyncAggregatorAgent):
            def __init__(self):
                super().__init__([FactCheckEvent, AnswerEvent])

            async def process_events(self, events):
                ...
    """

    def __init__(self, event_types_needed: list[EventType]):
        self._event_types_needed = [event_type_name(t) for t in event_types_needed]
        self._results: dict[str, list[Event]] = {}
        self._waiters: dict[str, _QuorumWaiter] = {}

    @property
    def event_types_needed(self) -> list[str]:
        return list(self._event_types_needed)

    def pending(self, correlation_id: str) -> list[Event]:
        """Events accumulated so far for a correlation id."""
        return list(self._results.get(correlation_id, []))

    async def receive_event_async(self, event: Event) -> Result[list[Event]]:
        """Accumulate an event and process the set once complete."""
        correlation_id = event.correlation_id
        if not correlation_id:
            return Err(MissingCorrelationIdError())

        self._capture_event(event)

        if not self._has_all_needed(correlation_id):
            return Ok([])

        events = self._results.pop(correlation_id, [])
        logger.debug(
            "%s quorum met with %s events",
            type(self).__name__,
            len(events),
            extra={"correlation_id": correlation_id},
        )
        return await self.process_events(events)

    async def wait_for_events(
        self, correlation_id: str, timeout: float | None = None
    ) -> Result[list[Event]]:
        """Wait until all needed event types have arrived for a correlation id.

        Args:
            correlation_id: The correlation id to wait for.
            timeout: Seconds to wait. None waits indefinitely.

        Returns:
            Ok with the complete event set, or Err(TimeoutExceededError).
        """
        if self._has_all_needed(correlation_id):
            return Ok(self.pending(correlation_id))

        # Left registered after a timeout so a late quorum is never lost.
        waiter = self._waiters.setdefault(correlation_id, _QuorumWaiter())
        try:
            await asyncio.wait_for(waiter.ready.wait(), timeout)
        except asyncio.TimeoutError:
            return Err(
                TimeoutExceededError(
                    f"Timeout waiting for events ({timeout}s)", timeout=timeout
                )
            )
        return Ok(list(waiter.events))

    @abstractmethod
    async def process_events(self, events: list[Event]) -> Result[list[Event]]:
        """Handle a complete set of events; return the events to emit next."""
        ...

    def _capture_event(self, event: Event) -> None:
        correlation_id = event.correlation_id
        self._results.setdefault(correlation_id, []).append(event)

        if self._has_all_needed(correlation_id):
            waiter = self._waiters.pop(correlation_id, None)
            if waiter:
                waiter.notify(self._results[correlation_id])

    def _has_all_needed(self, correlation_id: str) -> bool:
        captured = {e.type for e in self._results.get(correlation_id, [])}
        return all(needed in captured for needed in self._event_types_needed)
