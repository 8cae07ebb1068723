"""Schema validation for draft patient records.

This module checks a candidate record (mapping of field name to raw form value)
against the fixed patient schema. Every field is evaluated independently so
that all problems are reported together, letting the user fix the whole form
in one pass.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Union

from patient_dashboard.logging_audit import get_logger
from patient_dashboard.models.record import US_STATES, PatientRecord, Status, parse_instant
from patient_dashboard.utils.exceptions import ValidationError


logger = get_logger(__name__)


class ErrorCode(Enum):
    """Classification of a field-level validation failure."""

    REQUIRED = "REQUIRED"
    INVALID_DATE = "INVALID_DATE"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_TYPE = "INVALID_TYPE"


@dataclass(frozen=True)
class FieldError:
    """Single field failure with a message suitable for display next to the input.

    Attributes:
        code: Failure classification
        message: Human-readable reason
    """

    code: ErrorCode
    message: str


@dataclass(frozen=True)
class Accepted:
    """Validation passed; carries the normalized draft record."""

    record: PatientRecord

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Validation failed; carries every violated field.

    Attributes:
        field_errors: Mapping of field name to FieldError
    """

    field_errors: dict[str, FieldError] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return False

    def messages(self) -> dict[str, str]:
        """Return field name to message mapping."""
        return {name: error.message for name, error in self.field_errors.items()}

    def format_report(self) -> str:
        """Format the rejection as a human-readable report.

        Returns:
            Multi-line string listing each invalid field
        """
        lines = [f"Record rejected ({len(self.field_errors)} invalid field(s)):"]
        for name, error in self.field_errors.items():
            lines.append(f"  [{name}] {error.message} ({error.code.value})")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Export the rejection as a dictionary for JSON serialization."""
        return {
            "valid": False,
            "errors": {
                name: {"code": error.code.value, "message": error.message}
                for name, error in self.field_errors.items()
            },
        }


ValidationOutcome = Union[Accepted, Rejected]

# Exactly five ASCII digits, no trailing newline
ZIP_PATTERN = re.compile(r"[0-9]{5}")

REQUIRED_TEXT_FIELDS = ("first_name", "last_name", "street_address", "city")
OPTIONAL_TEXT_FIELDS = ("middle_name", "notes")

MESSAGE_REQUIRED = "Required"
MESSAGE_INVALID_DATE = "Must be a valid date in the past"
MESSAGE_INVALID_ZIP = "Must be a 5-digit ZIP code"
MESSAGE_INVALID_TYPE = "Expected text"

_STATUS_VALUES = frozenset(status.value for status in Status)
_STATE_NAMES = frozenset(US_STATES)


def validate_record(
    candidate: Mapping[str, Any], now: Optional[datetime] = None
) -> ValidationOutcome:
    """Validate a candidate record against the patient schema.

    Rules are evaluated per field without short-circuiting. Empty strings and
    absent keys are treated alike; values are never trimmed.

    Args:
        candidate: Mapping of field name to raw value (usually strings)
        now: Evaluation instant for the date-of-birth check. Defaults to the
            current UTC time.

    Returns:
        Accepted with the normalized record, or Rejected listing every invalid field
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    errors: dict[str, FieldError] = {}

    for name in REQUIRED_TEXT_FIELDS:
        value = candidate.get(name)
        if value is not None and not isinstance(value, str):
            errors[name] = FieldError(ErrorCode.INVALID_TYPE, MESSAGE_INVALID_TYPE)
        elif not value:
            errors[name] = FieldError(ErrorCode.REQUIRED, MESSAGE_REQUIRED)

    for name in OPTIONAL_TEXT_FIELDS:
        value = candidate.get(name)
        if value is not None and not isinstance(value, str):
            errors[name] = FieldError(ErrorCode.INVALID_TYPE, MESSAGE_INVALID_TYPE)

    dob_value = candidate.get("date_of_birth")
    birth_instant = None
    if dob_value is not None and not isinstance(dob_value, str):
        errors["date_of_birth"] = FieldError(ErrorCode.INVALID_TYPE, MESSAGE_INVALID_TYPE)
    elif not dob_value:
        errors["date_of_birth"] = FieldError(ErrorCode.REQUIRED, MESSAGE_REQUIRED)
    else:
        birth_instant = parse_instant(dob_value)
        if birth_instant is None or not birth_instant < now:
            errors["date_of_birth"] = FieldError(
                ErrorCode.INVALID_DATE, MESSAGE_INVALID_DATE
            )

    status_value = candidate.get("status")
    if isinstance(status_value, Status):
        status_value = status_value.value
    if not isinstance(status_value, str) or status_value not in _STATUS_VALUES:
        errors["status"] = FieldError(ErrorCode.REQUIRED, MESSAGE_REQUIRED)

    state_value = candidate.get("state")
    if not isinstance(state_value, str) or state_value not in _STATE_NAMES:
        errors["state"] = FieldError(ErrorCode.REQUIRED, MESSAGE_REQUIRED)

    zip_value = candidate.get("zip_code")
    if not isinstance(zip_value, str) or not ZIP_PATTERN.fullmatch(zip_value):
        errors["zip_code"] = FieldError(ErrorCode.INVALID_FORMAT, MESSAGE_INVALID_ZIP)

    if errors:
        logger.debug(f"Draft rejected: {', '.join(sorted(errors))}")
        return Rejected(field_errors=errors)

    record = PatientRecord(
        first_name=candidate["first_name"],
        middle_name=candidate.get("middle_name"),
        last_name=candidate["last_name"],
        date_of_birth=birth_instant.date().isoformat(),
        status=status_value,
        street_address=candidate["street_address"],
        city=candidate["city"],
        state=state_value,
        zip_code=zip_value,
        notes=candidate.get("notes"),
    )
    return Accepted(record=record)


def require_valid(
    candidate: Mapping[str, Any], now: Optional[datetime] = None
) -> PatientRecord:
    """Validate a candidate record and raise on rejection.

    Args:
        candidate: Mapping of field name to raw value
        now: Evaluation instant for the date-of-birth check

    Returns:
        The normalized draft record

    Raises:
        ValidationError: If any field is invalid; ``field_errors`` lists them
    """
    outcome = validate_record(candidate, now=now)
    if isinstance(outcome, Rejected):
        raise ValidationError(outcome.format_report(), field_errors=outcome.messages())
    return outcome.record
