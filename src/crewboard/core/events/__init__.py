"""In-process event bus for the dashboard.

Example usage:
    from crewboard.core.events import DashboardEvent, EventRegistry

    registry = EventRegistry()

    async def repaint(event, data):
        await scheduler.trigger_now(only=[data["entity_type"]])

    registry.register(DashboardEvent.RECORD_AFTER_UPDATE, repaint)
"""

from crewboard.core.events.event_names import (
    EVENT_CATEGORIES,
    MUTATION_EVENTS,
    DashboardEvent,
    EventCategory,
)
from crewboard.core.events.event_registry import (
    EventRegistry,
    EventResult,
    RegisteredListener,
)

__all__ = [
    "DashboardEvent",
    "EVENT_CATEGORIES",
    "EventCategory",
    "EventRegistry",
    "EventResult",
    "MUTATION_EVENTS",
    "RegisteredListener",
]
