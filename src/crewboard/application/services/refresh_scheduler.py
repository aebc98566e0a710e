"""Polling refresh of every dashboard view.

The record store offers no push channel, so views are kept fresh by a
single asyncio task that re-fetches on a fixed interval, plus explicit
triggers after mutations. A tick refreshes, in order:

    1. the dashboard card of every visible entity type
    2. the table of every open view
    3. the chat stream

A failure in one of them is painted as that view's error and does not
stop the others or the loop.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from crewboard.application.services.chat_stream import ChatStream
from crewboard.application.views.table_view import TableView
from crewboard.application.views.view_state import ViewError, ViewState
from crewboard.core.events import MUTATION_EVENTS, DashboardEvent, EventRegistry
from crewboard.core.exceptions import CrewboardError
from crewboard.core.logging import LoggingContext, get_logger, new_correlation_id
from crewboard.domain.services.dashboard_summarizer import DashboardSummarizer
from crewboard.domain.services.schema_registry import SchemaRegistry
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)

DEFAULT_INTERVAL_MS = 30000


@dataclass
class TickReport:
    """What one refresh tick did.

    Attributes:
        tick: Sequence number of the tick.
        refreshed: Views repainted successfully ("summary:Memo", "table:Memo", "chat").
        failed: View name to error message for views that failed.
    """

    tick: int
    refreshed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class RefreshScheduler:
    """Drives periodic and triggered refreshes into a ViewState."""

    def __init__(
        self,
        client: RecordClient,
        schemas: SchemaRegistry,
        table_view: TableView,
        summarizer: DashboardSummarizer,
        chat_stream: ChatStream,
        view_state: ViewState,
        events: EventRegistry,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        refresh_on_start: bool = True,
        visible_types: Callable[[], list[str]] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            visible_types: Returns the entity types the current session may
                see. Defaults to every registered type.
        """
        self.client = client
        self.schemas = schemas
        self.table_view = table_view
        self.summarizer = summarizer
        self.chat_stream = chat_stream
        self.view_state = view_state
        self.events = events
        self.interval_ms = interval_ms
        self.refresh_on_start = refresh_on_start
        self._visible_types = visible_types or (lambda: self.schemas.names)

        self._task: asyncio.Task | None = None
        self._stopped = True
        self._tick_count = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._stopped

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def start(self, interval_ms: int | None = None) -> None:
        """Start the polling task. No-op if already running.

        Must be called from within a running event loop.
        """
        if self.is_running:
            return
        if interval_ms is not None:
            if interval_ms <= 0:
                raise ValueError("Refresh interval must be positive")
            self.interval_ms = interval_ms

        self._stopped = False
        self._task = asyncio.create_task(self._run(), name="crewboard-refresh")
        logger.info("Refresh scheduler started", interval_ms=self.interval_ms)

    def stop(self) -> None:
        """Stop polling. Idempotent; a tick already scheduled never fires."""
        if self._stopped:
            return
        self._stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.info("Refresh scheduler stopped", ticks=self._tick_count)

    async def join(self) -> None:
        """Wait for the polling task to finish after ``stop``."""
        task, self._task = self._task, None
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def trigger_now(self, only: Iterable[str] | None = None) -> TickReport:
        """Run a refresh immediately.

        Args:
            only: Restrict the table refresh to these entity types and skip
                the chat stream. Dashboard cards are always refreshed.
        """
        scope = list(only) if only is not None else None
        return await self._tick(only=scope)

    def refresh_after_mutations(self, events: EventRegistry | None = None) -> list[str]:
        """Register listeners that refresh the affected views after every mutation.

        Returns:
            The listener ids.
        """
        registry = events or self.events

        async def on_mutation(event: str, data: dict[str, Any]) -> None:
            await self.trigger_now(only=[data["entity_type"]])

        return [
            registry.register(event, on_mutation, priority=-10)
            for event in sorted(MUTATION_EVENTS)
        ]

    async def _run(self) -> None:
        try:
            if self.refresh_on_start and not self._stopped:
                await self._guarded_tick()
            while not self._stopped:
                await asyncio.sleep(self.interval_ms / 1000)
                if self._stopped:
                    break
                await self._guarded_tick()
        except asyncio.CancelledError:
            logger.debug("Refresh task cancelled")
            raise

    async def _guarded_tick(self) -> None:
        try:
            await self._tick()
        except Exception:
            logger.exception("Refresh tick failed unexpectedly")

    async def _tick(self, only: list[str] | None = None) -> TickReport:
        self._tick_count += 1
        report = TickReport(tick=self._tick_count)

        with LoggingContext(correlation_id=new_correlation_id("tick"), tick=report.tick):
            visible = [name for name in self._visible_types() if name in self.schemas]

            for entity_type in visible:
                await self._refresh_summary(entity_type, report)

            for entity_type in list(self.view_state.open_views):
                if entity_type not in visible:
                    continue
                if only is not None and entity_type not in only:
                    continue
                await self._refresh_table(entity_type, report)

            if only is None:
                await self._refresh_chat(report)

            logger.debug(
                "Refresh tick finished",
                refreshed=len(report.refreshed),
                failed=list(report.failed),
            )

        await self.events.emit(
            DashboardEvent.REFRESH_AFTER_TICK,
            {"tick": report.tick, "failed": list(report.failed)},
        )
        return report

    async def _refresh_summary(self, entity_type: str, report: TickReport) -> None:
        view_name = f"summary:{entity_type}"
        try:
            records = await self.client.fetch_collection(entity_type)
            summary = self.summarizer.summarize(entity_type, records)
        except CrewboardError as e:
            logger.warning("Dashboard refresh failed", entity_type=entity_type, error=e.message)
            self.view_state.paint_summary(entity_type, ViewError(entity_type, e.message))
            report.failed[view_name] = e.message
            return
        self.view_state.paint_summary(entity_type, summary)
        report.refreshed.append(view_name)

    async def _refresh_table(self, entity_type: str, report: TickReport) -> None:
        view_name = f"table:{entity_type}"
        try:
            records = await self.client.fetch_collection(entity_type)
            render = self.table_view.render(entity_type, list(reversed(records)))
        except CrewboardError as e:
            logger.warning("Table refresh failed", entity_type=entity_type, error=e.message)
            self.view_state.paint_table(entity_type, ViewError(entity_type, e.message))
            report.failed[view_name] = e.message
            return
        if entity_type in self.view_state.open_views:
            self.view_state.paint_table(entity_type, render)
        report.refreshed.append(view_name)

    async def _refresh_chat(self, report: TickReport) -> None:
        try:
            render = await self.chat_stream.refresh()
        except CrewboardError as e:
            logger.warning("Chat refresh failed", error=e.message)
            self.view_state.paint_chat(ViewError(self.chat_stream.collection, e.message))
            report.failed["chat"] = e.message
            return
        self.view_state.paint_chat(render)
        report.refreshed.append("chat")
