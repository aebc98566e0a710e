"""Event definitions and categories.

This module defines the events emitted inside a running dashboard.
Listeners subscribe to them through the ``EventRegistry``.

Events carry a ``data`` dict. Record and view events always include
``entity_type``; record events also include ``record_id``.
"""


class EventCategory:
    """Categories for organizing events."""

    VIEW_ACTIONS = "view_actions"
    RECORD_OPERATIONS = "record_operations"
    CHAT = "chat"
    REFRESH = "refresh"
    SESSION = "session"


class DashboardEvent:
    """Event names.

    - *_requested events are emitted by views when the user asks for an action
    - *_after_* events are emitted after an operation succeeded
    """

    # View actions (emitted by TableView)
    EDIT_REQUESTED = "edit_requested"
    ARCHIVE_REQUESTED = "archive_requested"

    # Record operations
    RECORD_AFTER_CREATE = "record_after_create"
    RECORD_AFTER_UPDATE = "record_after_update"
    RECORD_AFTER_ARCHIVE = "record_after_archive"

    # Chat
    CHAT_AFTER_POST = "chat_after_post"

    # Refresh
    REFRESH_AFTER_TICK = "refresh_after_tick"

    # Session
    SESSION_AFTER_LOGIN = "session_after_login"
    SESSION_AFTER_LOGOUT = "session_after_logout"


EVENT_CATEGORIES: dict[str, list[str]] = {
    EventCategory.VIEW_ACTIONS: [
        DashboardEvent.EDIT_REQUESTED,
        DashboardEvent.ARCHIVE_REQUESTED,
    ],
    EventCategory.RECORD_OPERATIONS: [
        DashboardEvent.RECORD_AFTER_CREATE,
        DashboardEvent.RECORD_AFTER_UPDATE,
        DashboardEvent.RECORD_AFTER_ARCHIVE,
    ],
    EventCategory.CHAT: [
        DashboardEvent.CHAT_AFTER_POST,
    ],
    EventCategory.REFRESH: [
        DashboardEvent.REFRESH_AFTER_TICK,
    ],
    EventCategory.SESSION: [
        DashboardEvent.SESSION_AFTER_LOGIN,
        DashboardEvent.SESSION_AFTER_LOGOUT,
    ],
}

# Events after which the affected views should be repainted
MUTATION_EVENTS: frozenset[str] = frozenset(
    EVENT_CATEGORIES[EventCategory.RECORD_OPERATIONS]
)

