"""Dashboard application: wiring and the user-action boundary.

DashboardApp builds every component from Settings, connects the table
actions to the edit session and the archive coordinator, and exposes the
user actions. Each action catches CrewboardError, logs it and returns an
ActionResult, so no error escapes to the caller or the refresh loop.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from crewboard.application.services.archive_coordinator import ArchiveCoordinator
from crewboard.application.services.chat_stream import ChatStream
from crewboard.application.services.edit_session import EditSession
from crewboard.application.services.record_service import RecordService
from crewboard.application.services.refresh_scheduler import RefreshScheduler
from crewboard.application.services.session_service import SessionService
from crewboard.application.views.table_view import TableView
from crewboard.application.views.view_state import ViewState
from crewboard.core.config import Settings, get_settings
from crewboard.core.events import DashboardEvent, EventRegistry
from crewboard.core.exceptions import (
    ApiError,
    CrewboardError,
    PartialFailure,
    TransportError,
)
from crewboard.core.logging import LoggingContext, get_logger, new_correlation_id
from crewboard.domain.services.dashboard_summarizer import DashboardSummarizer
from crewboard.domain.services.schema_registry import SchemaRegistry
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)

ARCHIVE_CONFIRMATION = "Delete this item? It will be moved to Archive."

ConfirmCallback = Callable[[str], bool | Awaitable[bool]]


@dataclass
class ActionResult:
    """Outcome of a user action, ready to show to the user.

    Attributes:
        success: Whether the action completed.
        message: Human-readable outcome.
        error: The error that stopped the action, if any.
        value: Action-specific return value (e.g. the created record).
    """

    success: bool
    message: str
    error: CrewboardError | None = None
    value: Any = None

    @property
    def needs_reconciliation(self) -> bool:
        """True when an archive left a duplicate that must be cleaned up by hand."""
        return isinstance(self.error, PartialFailure)


def _never_confirm(message: str) -> bool:
    return False


class DashboardApp:
    """The running dashboard.

    Example:
        async with DashboardApp(settings, confirm=ask_user) as app:
            await app.open_view("Memo")
            result = await app.archive_record("Memo", "m5")
            if not result.success:
                print(result.message)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: RecordClient | None = None,
        schemas: SchemaRegistry | None = None,
        confirm: ConfirmCallback | None = None,
    ) -> None:
        """Build and wire every component.

        Args:
            settings: Configuration; loaded from the environment if omitted.
            client: Record store client; built from settings if omitted.
            schemas: Entity schemas; the built-in crew schemas if omitted.
            confirm: Asked before every archive. Defaults to refusing, so
                nothing is archived without an explicit confirmation hook.
        """
        self.settings = settings or get_settings()
        self.confirm = confirm or _never_confirm

        self.events = EventRegistry()
        self.schemas = schemas or SchemaRegistry(archive_prefix=self.settings.archive_prefix)
        self.client = client or RecordClient(
            self.settings.store_url,
            timeout=self.settings.request_timeout_seconds,
            chat_collection=self.settings.chat_collection,
        )

        self.view_state = ViewState()
        self.table_view = TableView(self.schemas, self.events)
        self.summarizer = DashboardSummarizer(self.schemas, limit=self.settings.dashboard_limit)
        self.records = RecordService(self.client, self.schemas, self.events)
        self.edit_session = EditSession(self.client, self.schemas, self.events)
        self.archiver = ArchiveCoordinator(
            self.client, self.schemas, self.events, mode=self.settings.archive_mode
        )
        self.chat = ChatStream(
            self.client,
            self.events,
            collection=self.settings.chat_collection,
            default_author=self.settings.default_chat_author,
        )
        self.session = SessionService(
            self.client,
            self.schemas,
            self.events,
            users_collection=self.settings.users_collection,
            role_visibility=self.settings.role_visibility,
            require_login=self.settings.require_login,
        )
        self.scheduler = RefreshScheduler(
            self.client,
            self.schemas,
            self.table_view,
            self.summarizer,
            self.chat,
            self.view_state,
            self.events,
            interval_ms=self.settings.refresh_interval_ms,
            refresh_on_start=self.settings.refresh_on_start,
            visible_types=self.session.visible_entity_types,
        )

        self._wire()

    def _wire(self) -> None:
        self.events.register(DashboardEvent.EDIT_REQUESTED, self._on_edit_requested)
        self.events.register(DashboardEvent.ARCHIVE_REQUESTED, self._on_archive_requested)
        if self.settings.refresh_after_mutation:
            self.scheduler.refresh_after_mutations()

    async def __aenter__(self) -> "DashboardApp":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def start_polling(self, interval_ms: int | None = None) -> None:
        """Start the refresh scheduler."""
        self.scheduler.start(interval_ms)

    async def aclose(self) -> None:
        """Stop polling, drop any open edit and close the client."""
        self.scheduler.stop()
        await self.scheduler.join()
        self.edit_session.cancel()
        await self.client.aclose()
        logger.debug("Dashboard closed")

    # Session

    async def login(self, username: str, password: str) -> ActionResult:
        async def operation() -> Any:
            state = await self.session.login(username, password)
            if self.scheduler.is_running:
                await self.scheduler.trigger_now()
            return state

        return await self._run_action("login", "Login failed", operation, "Logged in")

    async def logout(self) -> ActionResult:
        async def operation() -> None:
            self.edit_session.cancel()
            await self.session.logout()
            for entity_type in list(self.view_state.open_views):
                self.view_state.close_view(entity_type)

        return await self._run_action("logout", "Logout failed", operation, "Logged out")

    # Views

    async def open_view(self, entity_type: str) -> ActionResult:
        """Open a table view and paint it right away."""

        async def operation() -> Any:
            self.schemas.get(entity_type)
            self.view_state.open_view(entity_type)
            report = await self.scheduler.trigger_now(only=[entity_type])
            return self.view_state.tables.get(entity_type), report

        return await self._run_action("open_view", "Failed to load", operation, "Loaded")

    def close_view(self, entity_type: str) -> None:
        self.view_state.close_view(entity_type)

    async def refresh(self) -> ActionResult:
        """Refresh every view now."""

        async def operation() -> Any:
            report = await self.scheduler.trigger_now()
            if not report.ok:
                failed = ", ".join(report.failed)
                logger.info("Refresh finished with failures", failed=failed)
            return report

        return await self._run_action("refresh", "Refresh failed", operation, "Refreshed")

    # Records

    async def add_record(self, entity_type: str, values: dict[str, Any]) -> ActionResult:
        return await self._run_action(
            "add",
            "Add failed",
            lambda: self.records.add(entity_type, values),
            "Added",
        )

    async def open_edit(self, entity_type: str, record_id: str) -> ActionResult:
        if not record_id:
            return ActionResult(success=False, message="Cannot edit: UID missing")
        return await self._run_action(
            "open_edit",
            "Failed to load item",
            lambda: self.edit_session.open(entity_type, record_id),
            "Editing",
        )

    async def submit_edit(self, values: dict[str, str] | None = None) -> ActionResult:
        """Apply ``values`` to the open form, then save it."""

        async def operation() -> None:
            if values:
                self.edit_session.update_fields(values)
            await self.edit_session.submit()

        return await self._run_action("submit_edit", "Update failed", operation, "Updated")

    def cancel_edit(self) -> None:
        self.edit_session.cancel()

    async def archive_record(self, entity_type: str, record_id: str) -> ActionResult:
        """Archive a record after asking for confirmation."""
        answer = self.confirm(ARCHIVE_CONFIRMATION)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.debug("Archive declined", entity_type=entity_type, record_id=record_id)
            return ActionResult(success=False, message="Archive cancelled")

        return await self._run_action(
            "archive",
            "Delete failed",
            lambda: self.archiver.archive(entity_type, record_id),
            "Deleted and moved to Archive",
        )

    # Chat

    async def post_message(self, text: str, author: str | None = None) -> ActionResult:
        """Post to the chat stream as ``author`` or the logged-in user."""
        name = author if author is not None else (self.session.state.username or "")

        async def operation() -> Any:
            render = await self.chat.post(name, text)
            self.view_state.paint_chat(render)
            return render

        return await self._run_action("chat", "Chat failed", operation, "Sent")

    async def refresh_chat(self) -> ActionResult:
        """Re-read the chat stream into the view state."""

        async def operation() -> Any:
            render = await self.chat.refresh()
            self.view_state.paint_chat(render)
            return render

        return await self._run_action("chat_refresh", "Failed to load chat", operation, "Loaded")

    # Event handlers

    async def _on_edit_requested(self, event: str, data: dict[str, Any]) -> None:
        await self.open_edit(data["entity_type"], data["record_id"])

    async def _on_archive_requested(self, event: str, data: dict[str, Any]) -> None:
        await self.archive_record(data["entity_type"], data["record_id"])

    async def _run_action(
        self,
        action: str,
        failure_prefix: str,
        operation: Callable[[], Awaitable[Any]],
        success_message: str,
    ) -> ActionResult:
        with LoggingContext(correlation_id=new_correlation_id("act"), action=action):
            try:
                value = await operation()
            except PartialFailure as e:
                logger.error(
                    "Action left a duplicate record",
                    entity_type=e.entity_type,
                    record_id=e.record_id,
                    archive_collection=e.archive_collection,
                )
                return ActionResult(
                    success=False,
                    message=f"{failure_prefix}: {e.message}. Remove the duplicate manually.",
                    error=e,
                )
            except (ApiError, TransportError) as e:
                logger.warning("Action failed", error=e.message, error_type=type(e).__name__)
                return ActionResult(success=False, message=f"{failure_prefix}: {e.message}", error=e)
            except CrewboardError as e:
                logger.info("Action rejected", error=e.message, error_type=type(e).__name__)
                return ActionResult(success=False, message=f"{failure_prefix}: {e.message}", error=e)

            logger.debug("Action succeeded")
            return ActionResult(success=True, message=success_message, value=value)
