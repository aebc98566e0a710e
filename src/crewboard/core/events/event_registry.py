"""Event registry - listener registration and dispatch.

The EventRegistry decouples the parts of the dashboard that raise
events (views, record operations, the chat stream) from the parts that
react to them (edit session, archive coordinator, refresh scheduler).
It provides:
- Registration of listeners with filters and priority
- Dispatch in priority order
- Tag-based filtering (e.g. only for one entity type)
- Error isolation and logging
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from crewboard.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RegisteredListener:
    """Internal representation of a registered listener.

    Attributes:
        id: Unique identifier for this registration.
        event: The event this listener is registered for.
        callback: Function called as ``callback(event, data)``; may be async.
        filters: Tag-based filters (e.g., {"entity_type": "Memo"}).
        priority: Execution priority (higher = earlier).
        stop_on_error: Whether errors should stop the remaining listeners.
        registration_order: Order in which this listener was registered.
    """

    id: str
    event: str
    callback: Callable
    filters: dict[str, Any] = field(default_factory=dict)
    priority: int = 0
    stop_on_error: bool = False
    registration_order: int = 0


@dataclass
class EventResult:
    """Outcome of dispatching one event.

    Attributes:
        success: False when a stop_on_error listener failed.
        listener_count: Number of listeners that were called.
        errors: Error messages from failed listeners.
    """

    success: bool = True
    listener_count: int = 0
    errors: list[str] = field(default_factory=list)


class EventRegistry:
    """Listener registration and dispatch engine.

    Example:
        registry = EventRegistry()

        listener_id = registry.register(
            event=DashboardEvent.RECORD_AFTER_UPDATE,
            callback=on_record_changed,
            filters={"entity_type": "Memo"},
        )

        await registry.emit(
            DashboardEvent.RECORD_AFTER_UPDATE,
            {"entity_type": "Memo", "record_id": "m5"},
        )

        registry.unregister(listener_id)
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[RegisteredListener]] = {}
        self._registration_counter: int = 0
        self._listener_map: dict[str, RegisteredListener] = {}

    def register(
        self,
        event: str,
        callback: Callable,
        filters: Optional[dict[str, Any]] = None,
        priority: int = 0,
        stop_on_error: bool = False,
    ) -> str:
        """Register a listener for an event.

        Args:
            event: Event name (see ``DashboardEvent``).
            callback: Function accepting ``(event, data)``. Coroutine
                      functions are awaited.
            filters: Optional tag-based filters. The listener only fires if
                     every filter key matches the emitted data.
            priority: Execution priority. Higher priority listeners run first.
            stop_on_error: If True, an error in this listener stops dispatch.

        Returns:
            Unique listener id for later removal.
        """
        listener_id = f"lsn_{uuid.uuid4().hex[:12]}"

        # FIFO ordering within the same priority
        self._registration_counter += 1

        listener = RegisteredListener(
            id=listener_id,
            event=event,
            callback=callback,
            filters=filters or {},
            priority=priority,
            stop_on_error=stop_on_error,
            registration_order=self._registration_counter,
        )

        self._listeners.setdefault(event, []).append(listener)
        self._listener_map[listener_id] = listener

        logger.debug(
            "Listener registered",
            listener_id=listener_id,
            dashboard_event=event,
            priority=priority,
            filters=filters,
        )

        return listener_id

    def unregister(self, listener_id: str) -> bool:
        """Remove a registered listener.

        Returns:
            True if the listener was removed, False if it was not found.
        """
        listener = self._listener_map.pop(listener_id, None)
        if listener is None:
            logger.warning("Listener not found for unregister", listener_id=listener_id)
            return False

        remaining = [
            lsn for lsn in self._listeners.get(listener.event, []) if lsn.id != listener_id
        ]
        if remaining:
            self._listeners[listener.event] = remaining
        else:
            self._listeners.pop(listener.event, None)

        logger.debug(
            "Listener unregistered", listener_id=listener_id, dashboard_event=listener.event
        )
        return True

    async def emit(
        self,
        event: str,
        data: Optional[dict[str, Any]] = None,
    ) -> EventResult:
        """Dispatch an event to all matching listeners.

        Listeners run sequentially in priority order (higher first), then
        registration order. A failing listener is logged and skipped unless
        it was registered with ``stop_on_error``.

        Args:
            event: Event name.
            data: Event payload. Also used to match listener filters.

        Returns:
            EventResult describing the dispatch.
        """
        result = EventResult()
        data = data or {}

        matching = self._filter_listeners(self._listeners.get(event, []), data)
        if not matching:
            return result

        ordered = sorted(matching, key=lambda lsn: (-lsn.priority, lsn.registration_order))

        logger.debug(
            "Emitting event",
            dashboard_event=event,
            listener_count=len(ordered),
        )

        for listener in ordered:
            result.listener_count += 1
            try:
                outcome = listener.callback(event, data)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                logger.error(
                    "Listener failed",
                    listener_id=listener.id,
                    dashboard_event=event,
                    error=str(e),
                    stop_on_error=listener.stop_on_error,
                )
                result.errors.append(f"Listener {listener.id} failed: {e}")
                if listener.stop_on_error:
                    result.success = False
                    return result

        return result

    def _filter_listeners(
        self,
        listeners: list[RegisteredListener],
        data: dict[str, Any],
    ) -> list[RegisteredListener]:
        """Select listeners whose filters all match the event data.

        A listener without filters matches every emission.
        """
        matching = []
        for listener in listeners:
            if all(
                data.get(key) is not None and data.get(key) == value
                for key, value in listener.filters.items()
            ):
                matching.append(listener)
        return matching

