"""Pydantic schemas for the record store's wire format.

Every store response is a JSON envelope:

    {"status": "success", "data": [...]}
    {"status": "error", "message": "UID not found"}
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StoreAction:
    """Values of the ``action`` query parameter."""

    GET = "get"
    GET_ITEM = "getItem"
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    CHAT = "chat"


SUCCESS_STATUS = "success"


class StoreEnvelope(BaseModel):
    """Response envelope returned by every store action."""

    model_config = ConfigDict(extra="ignore")

    status: str = Field(..., description="'success' or an error status")
    data: Any = Field(None, description="Array for get, object for getItem, empty for mutations")
    message: str | None = Field(None, description="Error description when status is not success")

    @property
    def ok(self) -> bool:
        return self.status.lower() == SUCCESS_STATUS
