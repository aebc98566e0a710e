"""HTTP client for the remote record store.

The store is reached with plain GET requests whose query parameters name
the collection (``sheet``), the ``action`` and, for single-record actions,
the ``UID``. Field values travel as further query parameters.
"""

from typing import Any

import httpx
from pydantic import ValidationError as EnvelopeValidationError

from crewboard.core.exceptions import ApiError, TransportError
from crewboard.core.logging import get_logger
from crewboard.domain.entities.chat_message import AUTHOR_COLUMN, TEXT_COLUMN
from crewboard.domain.entities.record import ID_COLUMN, Record
from crewboard.infrastructure.client.schemas import StoreAction, StoreEnvelope

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_CHAT_COLLECTION = "Chatboard"


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class RecordClient:
    """Generic request/response wrapper around the record store.

    Each call issues exactly one request. Nothing is retried, cancelled or
    de-duplicated; callers surface errors and let the user retry.

    Example:
        async with RecordClient("https://store.example/exec") as client:
            memos = await client.fetch_collection("Memo")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        chat_collection: str = DEFAULT_CHAT_COLLECTION,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Store web app URL; query parameters are appended to it.
            timeout: Per-request timeout in seconds.
            chat_collection: Collection the chat action writes to.
            http_client: Optional pre-built client (tests, shared pools).
        """
        self.base_url = base_url
        self.chat_collection = chat_collection
        self._owns_client = http_client is None
        # Apps Script web apps answer with a redirect to the content host
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "RecordClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def fetch_rows(self, collection: str) -> list[dict[str, Any]]:
        """Fetch every row of a collection as raw column mappings."""
        payload = await self._request(collection, StoreAction.GET)
        if payload is None:
            return []
        if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
            raise TransportError(
                f"Malformed response for {collection}: expected a list of rows"
            )
        return payload

    async def fetch_collection(self, collection: str) -> list[Record]:
        """Fetch every record of a collection, in the order the store holds them."""
        rows = await self.fetch_rows(collection)
        return [Record.from_store(row) for row in rows]

    async def fetch_one(self, collection: str, record_id: str) -> Record:
        """Fetch a single record by id."""
        payload = await self._request(
            collection, StoreAction.GET_ITEM, {ID_COLUMN: record_id}
        )
        if not isinstance(payload, dict):
            raise TransportError(
                f"Malformed response for {collection}/{record_id}: expected a row object"
            )
        record = Record.from_store(payload)
        if record.id is None:
            record.id = record_id
        return record

    async def create(self, collection: str, fields: dict[str, Any]) -> Record:
        """Append a record to a collection.

        ``fields`` may carry a UID, which is how archive copies keep the id
        of their original.

        Returns:
            The stored row when the store echoes it, otherwise a Record built
            from the sent fields (its id is None unless one was sent).
        """
        payload = await self._request(collection, StoreAction.ADD, fields)
        if isinstance(payload, dict) and payload:
            return Record.from_store({**fields, **payload})
        return Record.from_store(dict(fields))

    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given fields of one record."""
        params = {key: value for key, value in fields.items() if key != ID_COLUMN}
        params[ID_COLUMN] = record_id
        await self._request(collection, StoreAction.UPDATE, params)

    async def remove(self, collection: str, record_id: str) -> None:
        """Delete one record from a collection."""
        await self._request(collection, StoreAction.DELETE, {ID_COLUMN: record_id})

    async def post_message(self, author: str, text: str) -> None:
        """Append a message to the chat collection."""
        await self._request(
            self.chat_collection,
            StoreAction.CHAT,
            {AUTHOR_COLUMN: author, TEXT_COLUMN: text},
        )

    async def _request(
        self,
        collection: str,
        action: str,
        fields: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one store request and unwrap its envelope.

        Returns:
            The envelope's data payload.

        Raises:
            TransportError: Network failure, non-2xx status or malformed body.
            ApiError: The envelope reports failure.
        """
        params = {"sheet": collection, "action": action}
        for key, value in (fields or {}).items():
            params[key] = _query_value(value)

        logger.debug(
            "Store request",
            collection=collection,
            action=action,
            record_id=params.get(ID_COLUMN),
        )

        try:
            response = await self._http.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.warning(
                "Store unreachable", collection=collection, action=action, error=str(e)
            )
            raise TransportError(f"Could not reach the record store: {e}", cause=e) from e

        if not response.is_success:
            logger.warning(
                "Store returned error status",
                collection=collection,
                action=action,
                status_code=response.status_code,
            )
            raise TransportError(
                f"Record store returned HTTP {response.status_code}",
                cause=httpx.HTTPStatusError(
                    f"HTTP {response.status_code}",
                    request=response.request,
                    response=response,
                ),
            )

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError("Record store returned a non-JSON response", cause=e) from e

        try:
            envelope = StoreEnvelope.model_validate(body)
        except EnvelopeValidationError as e:
            raise TransportError("Record store returned a malformed envelope", cause=e) from e

        if not envelope.ok:
            logger.info(
                "Store reported failure",
                collection=collection,
                action=action,
                store_message=envelope.message,
            )
            raise ApiError(envelope.message or "Unknown error")

        return envelope.data
