"""Models module.

This module provides data models and dataclasses for the application.
"""

from patient_dashboard.models.record import (
    DRAFT_FIELDS,
    RECORD_FIELDS,
    US_STATES,
    PatientRecord,
    Status,
)

__all__ = [
    "DRAFT_FIELDS",
    "RECORD_FIELDS",
    "US_STATES",
    "PatientRecord",
    "Status",
]
