"""Append-only chat stream shared by all dashboard users."""

from crewboard.application.views.view_state import ChatRender, ViewError
from crewboard.core.events import DashboardEvent, EventRegistry
from crewboard.core.exceptions import CrewboardError, ValidationError
from crewboard.core.logging import get_logger
from crewboard.domain.entities.chat_message import ChatMessage
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)

DEFAULT_AUTHOR = "User"


class ChatStream:
    """Posts to and reads the chat collection.

    Messages are stored oldest first and shown newest first. After every
    successful refresh or post the render is anchored on the newest
    message.
    """

    def __init__(
        self,
        client: RecordClient,
        events: EventRegistry,
        collection: str = "Chatboard",
        default_author: str = DEFAULT_AUTHOR,
    ) -> None:
        self.client = client
        self.events = events
        self.collection = collection
        self.default_author = default_author
        self.render = ChatRender()

    async def post(self, author: str, text: str) -> ChatRender | ViewError:
        """Post a message, then refresh the stream.

        A blank author posts under the default display name. The message is
        stored once the post returns; a failed refresh afterwards yields a
        ViewError for the stream instead of an exception.

        Raises:
            ValidationError: If the text is blank. Nothing is sent.
            TransportError, ApiError: If the post failed.
        """
        if not text or not text.strip():
            raise ValidationError("Message cannot be empty")

        display_name = (author or "").strip() or self.default_author
        await self.client.post_message(display_name, text)

        logger.info("Chat message posted", author=display_name)
        await self.events.emit(DashboardEvent.CHAT_AFTER_POST, {"author": display_name})
        try:
            return await self.refresh()
        except CrewboardError as e:
            logger.warning("Chat refresh after post failed", error=e.message)
            return ViewError(self.collection, e.message)

    async def refresh(self) -> ChatRender:
        """Re-read the stream and anchor the render on the newest message."""
        messages = await self.list()
        newest_first = tuple(reversed(messages))
        self.render = ChatRender(
            messages=newest_first,
            scroll_anchor=self._anchor_of(newest_first[0]) if newest_first else None,
        )
        return self.render

    async def list(self) -> list[ChatMessage]:
        """All messages in storage order, newest last."""
        rows = await self.client.fetch_rows(self.collection)
        return [ChatMessage.from_store(row) for row in rows]

    @staticmethod
    def _anchor_of(message: ChatMessage) -> str | None:
        return message.id or message.created_at
