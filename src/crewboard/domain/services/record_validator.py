"""Record validation service for checking form values against entity schemas.

Runs before any add or edit reaches the network. Supports the field kinds
declared by EntitySchema: text, long_text and date.
"""

from datetime import datetime
from typing import Any

from crewboard.core.exceptions import RecordValidationError, ValidationError
from crewboard.domain.entities.entity_schema import EntitySchema, FieldKind
from crewboard.domain.entities.record import SYSTEM_COLUMNS


def parse_date(value: str) -> datetime | None:
    """Parse an ISO 8601 date or datetime string, or return None."""
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def normalize_date(value: str | None) -> str:
    """Reduce a stored date or timestamp to ``YYYY-MM-DD``.

    Values that do not parse are returned unchanged so nothing the store
    holds is ever hidden.
    """
    if not value:
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.date().isoformat()


class RecordValidator:
    """Validator for add and edit form values against an entity schema.

    Validates unknown fields, required fields and date formats, and
    normalizes date values.
    """

    @classmethod
    def validate_text(cls, value: str, field_name: str) -> RecordValidationError | None:
        """Validate a text or long text value."""
        if not isinstance(value, str):
            return RecordValidationError(
                field=field_name,
                message=f"Expected text value, got {type(value).__name__}",
                code="invalid_type",
            )
        return None

    @classmethod
    def validate_date(cls, value: str, field_name: str) -> RecordValidationError | None:
        """Validate a date value. Blank values are left to the required check."""
        if not isinstance(value, str):
            return RecordValidationError(
                field=field_name,
                message=f"Expected date string, got {type(value).__name__}",
                code="invalid_type",
            )
        if value.strip() and parse_date(value) is None:
            return RecordValidationError(
                field=field_name,
                message="Invalid date format. Use YYYY-MM-DD",
                code="invalid_date_format",
            )
        return None

    @classmethod
    def validate_field_value(
        cls, value: str, kind: FieldKind, field_name: str
    ) -> RecordValidationError | None:
        """Validate a single value against its field kind."""
        if kind is FieldKind.DATE:
            return cls.validate_date(value, field_name)
        return cls.validate_text(value, field_name)

    @classmethod
    def validate(
        cls,
        schema: EntitySchema,
        data: dict[str, Any],
        partial: bool = False,
    ) -> tuple[dict[str, str], list[RecordValidationError]]:
        """Validate form values and prepare them for the store.

        Args:
            schema: Schema of the target collection.
            data: Column name to value mapping from the form.
            partial: If True, only fields present in ``data`` are checked and
                     returned; otherwise missing fields are sent blank.

        Returns:
            Tuple of (prepared values, errors). Date values are normalized
            to YYYY-MM-DD in the prepared values.
        """
        errors: list[RecordValidationError] = []
        prepared: dict[str, str] = {}

        for field_name in data:
            if field_name in SYSTEM_COLUMNS:
                errors.append(
                    RecordValidationError(
                        field=field_name,
                        message=f"'{field_name}' is assigned by the store and cannot be set",
                        code="system_field",
                    )
                )
            elif not schema.has_field(field_name):
                errors.append(
                    RecordValidationError(
                        field=field_name,
                        message=f"Unknown field '{field_name}' for {schema.name}",
                        code="unknown_field",
                    )
                )

        for spec in schema.fields:
            if spec.name not in data and partial:
                continue

            value = data.get(spec.name)
            if value is None:
                value = ""

            error = cls.validate_field_value(value, spec.kind, spec.name)
            if error:
                errors.append(error)
                continue

            if spec.required and not value.strip():
                errors.append(
                    RecordValidationError(
                        field=spec.name,
                        message=f"Required field '{spec.name}' is missing",
                        code="required_missing",
                    )
                )
                continue

            prepared[spec.name] = normalize_date(value) if spec.kind is FieldKind.DATE else value

        return prepared, errors

    @classmethod
    def check(
        cls,
        schema: EntitySchema,
        data: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, str]:
        """Validate form values and raise if any check fails.

        Returns:
            The prepared values.

        Raises:
            ValidationError: With every field error collected.
        """
        prepared, errors = cls.validate(schema, data, partial=partial)
        if errors:
            raise ValidationError(
                "; ".join(error.message for error in errors),
                errors=errors,
            )
        return prepared
