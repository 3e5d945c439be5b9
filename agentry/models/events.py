"""Event models exchanged between agents."""

import uuid
from dataclasses import dataclass
from typing import Union


def new_correlation_id() -> str:
    """Generate a fresh correlation id."""
    return str(uuid.uuid4())


@dataclass(kw_only=True)
class Event:
    """Base event for agent communication.

    Concrete events subclass this as dataclasses and add their payload
    fields. The class name is the event's type discriminator, so routing and
    aggregation never depend on a free-form string set by the producer.
    """

    source: str
    correlation_id: str | None = None

    @property
    def type(self) -> str:
        """Type discriminator used by Router and aggregators."""
        return type(self).__name__


@dataclass(kw_only=True)
class TerminateEvent(Event):
    """Signals the dispatcher to stop its processing loop."""


EventType = Union[type[Event], str]


def event_type_name(event_type: EventType) -> str:
    """Normalize an Event subclass or a type name to the discriminator string."""
    if isinstance(event_type, str):
        return event_type
    return event_type.__name__
