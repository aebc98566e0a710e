"""Domain services for Crewboard.

Services hold the logic that works on entities without touching the
network: schema lookup, form validation and dashboard projection.
"""

from crewboard.domain.services.dashboard_summarizer import (
    DEFAULT_SUMMARY_LIMIT,
    DashboardSummarizer,
    SummaryItem,
    SummaryView,
)
from crewboard.domain.services.record_validator import (
    RecordValidator,
    normalize_date,
    parse_date,
)
from crewboard.domain.services.schema_registry import (
    DEFAULT_ARCHIVE_PREFIX,
    DEFAULT_SCHEMAS,
    SchemaRegistry,
)

__all__ = [
    "DEFAULT_ARCHIVE_PREFIX",
    "DEFAULT_SCHEMAS",
    "DEFAULT_SUMMARY_LIMIT",
    "DashboardSummarizer",
    "RecordValidator",
    "SchemaRegistry",
    "SummaryItem",
    "SummaryView",
    "normalize_date",
    "parse_date",
]
