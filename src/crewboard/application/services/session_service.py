"""Session service for login and table visibility.

Login trusts the store's user list: the credentials are looked up in the
users collection and the matching row's role is kept for the lifetime of
the process. The role only decides which tables are shown.
"""

from crewboard.core.events import DashboardEvent, EventRegistry
from crewboard.core.exceptions import AuthenticationError, ValidationError
from crewboard.core.logging import get_logger
from crewboard.domain.entities.session import SessionState
from crewboard.domain.services.schema_registry import SchemaRegistry
from crewboard.infrastructure.client.record_client import RecordClient

logger = get_logger(__name__)

USERNAME_COLUMN = "Username"
PASSWORD_COLUMN = "Password"
ROLE_COLUMN = "Role"


class SessionService:
    """Holds the session flag and resolves visible entity types."""

    def __init__(
        self,
        client: RecordClient,
        schemas: SchemaRegistry,
        events: EventRegistry,
        users_collection: str = "Users",
        role_visibility: dict[str, list[str]] | None = None,
        require_login: bool = False,
    ) -> None:
        """Initialize the session service.

        Args:
            users_collection: Collection holding Username/Password/Role rows.
            role_visibility: Role to visible entity types. Roles not listed
                see every entity type.
            require_login: If True, nothing is visible until login.
        """
        self.client = client
        self.schemas = schemas
        self.events = events
        self.users_collection = users_collection
        self.role_visibility = role_visibility or {}
        self.require_login = require_login
        self.state = SessionState()

    async def login(self, username: str, password: str) -> SessionState:
        """Check credentials against the users collection.

        Raises:
            ValidationError: If either credential is blank.
            AuthenticationError: If no user matches.
            TransportError, ApiError: If the user list could not be fetched.
        """
        username = (username or "").strip()
        password = (password or "").strip()
        if not username or not password:
            raise ValidationError("Enter username and password")

        users = await self.client.fetch_rows(self.users_collection)
        match = next(
            (
                user
                for user in users
                if str(user.get(USERNAME_COLUMN, "")) == username
                and str(user.get(PASSWORD_COLUMN, "")) == password
            ),
            None,
        )
        if match is None:
            logger.info("Login rejected", username=username)
            raise AuthenticationError("Invalid username or password")

        self.state.logged_in = True
        self.state.username = username
        self.state.role = str(match.get(ROLE_COLUMN) or "")

        logger.info("User logged in", username=username, role=self.state.role)
        await self.events.emit(
            DashboardEvent.SESSION_AFTER_LOGIN,
            {"username": username, "role": self.state.role},
        )
        return self.state

    async def logout(self) -> None:
        """Clear the session. No-op when nobody is logged in."""
        if not self.state.logged_in:
            return
        username = self.state.username
        self.state.clear()
        logger.info("User logged out", username=username)
        await self.events.emit(DashboardEvent.SESSION_AFTER_LOGOUT, {"username": username})

    def visible_entity_types(self) -> list[str]:
        """Entity types whose tables and cards the session may see."""
        if not self.state.logged_in:
            return [] if self.require_login else self.schemas.names

        allowed = self.role_visibility.get(self.state.role or "")
        if allowed is None:
            return self.schemas.names
        return [name for name in self.schemas.names if name in allowed]
