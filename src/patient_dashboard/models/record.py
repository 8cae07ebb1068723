"""Patient record data model.

This module defines the PatientRecord dataclass used throughout the application
for representing a single patient entry, both as a draft (before the store
assigns ``id`` and ``created_at``) and as a persisted row.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional


class Status(str, Enum):
    """Patient lifecycle status."""

    INQUIRY = "Inquiry"
    ONBOARDING = "Onboarding"
    ACTIVE = "Active"
    CHURNED = "Churned"


US_STATES: tuple[str, ...] = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
    "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine",
    "Maryland", "Massachusetts", "Michigan", "Minnesota", "Mississippi",
    "Missouri", "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey",
    "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
    "South Dakota", "Tennessee", "Texas", "Utah", "Vermont", "Virginia",
    "Washington", "West Virginia", "Wisconsin", "Wyoming",
)

# Fields collected by the form, in display order
DRAFT_FIELDS: tuple[str, ...] = (
    "first_name",
    "middle_name",
    "last_name",
    "date_of_birth",
    "status",
    "street_address",
    "city",
    "state",
    "zip_code",
    "notes",
)

# Draft fields plus the store-assigned ones
RECORD_FIELDS: tuple[str, ...] = ("id",) + DRAFT_FIELDS + ("created_at",)


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or date-time string into an aware UTC datetime.

    A bare ``YYYY-MM-DD`` is midnight UTC. Naive date-times are treated as UTC
    and a trailing ``Z`` is accepted.

    Args:
        value: Text to parse

    Returns:
        Aware datetime in UTC, or None if the text does not parse
    """
    if not isinstance(value, str) or not value:
        return None

    text = value.strip()
    try:
        if len(text) == 10:
            parsed_date = date.fromisoformat(text)
            return datetime(
                parsed_date.year, parsed_date.month, parsed_date.day, tzinfo=timezone.utc
            )
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # An offset near year 1 or 9999 can push the UTC instant out of range
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class PatientRecord:
    """A single patient entry.

    Values are held in the store's text representation: ``date_of_birth`` is
    an ISO ``YYYY-MM-DD`` string and ``created_at`` an ISO-8601 timestamp.
    Use ``birth_date`` and ``created_instant`` for parsed values.

    Attributes:
        first_name: Patient's first name (required)
        last_name: Patient's last name (required)
        date_of_birth: ISO calendar date (required, in the past)
        status: One of the Status values
        street_address: Street address (required)
        city: City (required)
        state: Full US state name
        zip_code: Five-digit ZIP code
        middle_name: Middle name (optional)
        notes: Free-text notes (optional)
        id: Store-assigned identifier (absent on drafts)
        created_at: Store-assigned creation timestamp (absent on drafts)
    """

    first_name: str
    last_name: str
    date_of_birth: str
    status: str
    street_address: str
    city: str
    state: str
    zip_code: str
    middle_name: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_draft(self) -> bool:
        """Check whether the store has not yet assigned identity."""
        return self.id is None and self.created_at is None

    @property
    def birth_date(self) -> Optional[datetime]:
        """Date of birth as midnight UTC, or None when unparseable."""
        return parse_instant(self.date_of_birth)

    @property
    def created_instant(self) -> Optional[datetime]:
        """Creation timestamp in UTC, or None when absent or unparseable."""
        return parse_instant(self.created_at)

    def get(self, field_name: str) -> Any:
        """Return a field value by name, None for unknown fields."""
        if field_name not in RECORD_FIELDS:
            return None
        return getattr(self, field_name)

    def to_payload(self) -> dict[str, Any]:
        """Export the record as a store row.

        ``id`` and ``created_at`` are omitted when unset so drafts can be
        inserted as-is.

        Returns:
            Dictionary keyed by field name
        """
        payload = asdict(self)
        for assigned in ("id", "created_at"):
            if payload[assigned] is None:
                del payload[assigned]
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PatientRecord":
        """Build a record from a store row.

        Unknown keys are ignored and missing keys become None. Values are not
        validated: persisted rows are taken as the store returns them.

        Args:
            payload: Row mapping as returned by the store

        Returns:
            PatientRecord instance
        """
        values = {}
        for name in RECORD_FIELDS:
            value = payload.get(name)
            if value is not None and not isinstance(value, str):
                value = str(value)
            values[name] = value
        return cls(**values)
