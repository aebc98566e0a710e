"""Repaint target for refreshes.

ViewState holds what the dashboard currently shows: the rendered tables
of the open views, the dashboard cards and the chat stream. Refreshes
only ever write here; the open edit form lives in EditSession and is
never touched by a refresh.
"""

from dataclasses import dataclass, field

from crewboard.application.views.table_view import TableRender
from crewboard.domain.entities.chat_message import ChatMessage
from crewboard.domain.services.dashboard_summarizer import SummaryView


@dataclass(frozen=True)
class ViewError:
    """Shown in place of a view whose last refresh failed."""

    entity_type: str
    message: str


@dataclass(frozen=True)
class ChatRender:
    """Chat stream as shown: newest first, scrolled to the newest message."""

    messages: tuple[ChatMessage, ...] = field(default_factory=tuple)
    scroll_anchor: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.messages

    def as_text(self) -> str:
        if not self.messages:
            return "No messages yet"
        return "\n".join(
            f"[{message.created_at or '-'}] {message.author}: {message.text}"
            for message in self.messages
        )


@dataclass
class ViewState:
    """Latest renders of every view.

    Attributes:
        open_views: Entity types whose tables are open, in opening order.
        tables: Latest table render (or error) per open entity type.
        summaries: Latest dashboard card (or error) per entity type.
        chat: Latest chat render, or an error.
        repaint_count: Number of repaints applied, for change detection.
    """

    open_views: list[str] = field(default_factory=list)
    tables: dict[str, TableRender | ViewError] = field(default_factory=dict)
    summaries: dict[str, SummaryView | ViewError] = field(default_factory=dict)
    chat: ChatRender | ViewError | None = None
    repaint_count: int = 0

    def open_view(self, entity_type: str) -> None:
        if entity_type not in self.open_views:
            self.open_views.append(entity_type)

    def close_view(self, entity_type: str) -> None:
        if entity_type in self.open_views:
            self.open_views.remove(entity_type)
        self.tables.pop(entity_type, None)

    def paint_table(self, entity_type: str, render: TableRender | ViewError) -> None:
        self.tables[entity_type] = render
        self.repaint_count += 1

    def paint_summary(self, entity_type: str, summary: SummaryView | ViewError) -> None:
        self.summaries[entity_type] = summary
        self.repaint_count += 1

    def paint_chat(self, chat: ChatRender | ViewError) -> None:
        self.chat = chat
        self.repaint_count += 1
