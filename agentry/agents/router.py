"""Router implementation."""

from ..models import Event, EventType, event_type_name
from .base import AnyAgent


class Router:
    """Routes events to registered agents by event type.

    Several agents may subscribe to one type; they are returned in
    registration order.
    """

    def __init__(self):
        self._routes: dict[str, list[AnyAgent]] = {}

    def add_route(self, event_type: EventType, agent: AnyAgent) -> None:
        """Register an agent for an event type (Event subclass or its name)."""
        self._routes.setdefault(event_type_name(event_type), []).append(agent)

    def get_agents(self, event: Event) -> list[AnyAgent]:
        """Agents registered for the event's type; empty if none."""
        return list(self._routes.get(event.type, []))

    def clear(self) -> None:
        """Remove all routes."""
        self._routes.clear()
