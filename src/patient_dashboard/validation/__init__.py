"""Schema validation for draft patient records."""

from patient_dashboard.validation.validator import (
    Accepted,
    ErrorCode,
    FieldError,
    Rejected,
    ValidationOutcome,
    require_valid,
    validate_record,
)

__all__ = [
    "Accepted",
    "ErrorCode",
    "FieldError",
    "Rejected",
    "ValidationOutcome",
    "require_valid",
    "validate_record",
]
