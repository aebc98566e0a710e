"""Session state for the logged-in dashboard user."""

from dataclasses import dataclass


@dataclass
class SessionState:
    """Process-wide login flag and role.

    Lives as long as the dashboard process. Only used to gate which
    tables are visible.
    """

    logged_in: bool = False
    username: str | None = None
    role: str | None = None

    def clear(self) -> None:
        """Forget the logged-in user."""
        self.logged_in = False
        self.username = None
        self.role = None
