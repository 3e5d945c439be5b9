"""Agent contracts."""

from typing import Protocol, Union, runtime_checkable

from ..errors import Result
from ..models import Event


@runtime_checkable
class IAgent(Protocol):
    """Synchronous agent: pure, non-suspending transform or coordination logic.

    Returns the events to dispatch next; an empty list when the event is not
    one the agent handles.
    """

    def receive_event(self, event: Event) -> list[Event]:
        """Process an event and return follow-up events."""
        ...


@runtime_checkable
class IAsyncAgent(Protocol):
    """Asynchronous agent, used whenever processing performs I/O.

    Unrecognized events yield Ok([]), never an error.
    """

    async def receive_event_async(self, event: Event) -> Result[list[Event]]:
        """Process an event and return follow-up events or an error."""
        ...


AnyAgent = Union[IAgent, IAsyncAgent]


def agent_name(agent: object) -> str:
    """Name used for an agent in logs and traces."""
    return type(agent).__name__
