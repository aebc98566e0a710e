"""Core Crewboard utilities.

This module exports configuration, logging and error types used
throughout the application.
"""

from crewboard.core.config import Settings, get_settings
from crewboard.core.exceptions import (
    ApiError,
    AuthenticationError,
    CrewboardError,
    InvalidTransitionError,
    PartialFailure,
    RecordValidationError,
    TransportError,
    ValidationError,
)
from crewboard.core.logging import (
    LoggingContext,
    configure_logging,
    get_logger,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "CrewboardError",
    "InvalidTransitionError",
    "LoggingContext",
    "PartialFailure",
    "RecordValidationError",
    "Settings",
    "TransportError",
    "ValidationError",
    "configure_logging",
    "get_logger",
    "get_settings",
]
