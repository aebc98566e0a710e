"""Views rendered by the dashboard."""

from crewboard.application.views.table_view import (
    EMPTY_MESSAGE,
    TableCell,
    TableColumn,
    TableRender,
    TableRow,
    TableView,
)
from crewboard.application.views.view_state import ChatRender, ViewError, ViewState

__all__ = [
    "ChatRender",
    "EMPTY_MESSAGE",
    "TableCell",
    "TableColumn",
    "TableRender",
    "TableRow",
    "TableView",
    "ViewError",
    "ViewState",
]
