"""Exceptions raised by the Crewboard core.

Core components raise these; ``DashboardApp`` action methods catch them
at the boundary of the user action and report them.
"""

from dataclasses import dataclass


@dataclass
class RecordValidationError:
    """A single field-level validation failure."""

    field: str
    message: str
    code: str


class CrewboardError(Exception):
    """Base class for all Crewboard errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TransportError(CrewboardError):
    """Raised when the store could not be reached or answered garbage.

    Covers connection failures, timeouts, non-2xx statuses and bodies that
    are not the expected JSON envelope.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class ApiError(CrewboardError):
    """Raised when the store answered but reported failure."""


class ValidationError(CrewboardError):
    """Raised by local checks before any network call is attempted."""

    def __init__(
        self,
        message: str,
        errors: list[RecordValidationError] | None = None,
    ) -> None:
        self.errors = errors or []
        super().__init__(message)


class PartialFailure(CrewboardError):
    """Archive copy was written but the original could not be removed.

    The record now exists in both the live and the archive collection and
    needs manual reconciliation. Retrying the archive would write a second
    copy.
    """

    def __init__(
        self,
        entity_type: str,
        record_id: str,
        archive_collection: str,
        cause: BaseException,
    ) -> None:
        self.entity_type = entity_type
        self.record_id = record_id
        self.archive_collection = archive_collection
        self.cause = cause
        super().__init__(
            f"Record {record_id} was copied to {archive_collection} but could not "
            f"be removed from {entity_type}: {cause}"
        )


class InvalidTransitionError(CrewboardError):
    """Raised when an edit session operation is not valid in its current state."""


class AuthenticationError(CrewboardError):
    """Raised when login credentials do not match any user."""
