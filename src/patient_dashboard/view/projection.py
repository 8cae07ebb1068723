"""Display-only values derived from stored record fields.

Nothing computed here is written back to a record or the store.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from patient_dashboard.models.record import PatientRecord, parse_instant

YEAR_LENGTH = timedelta(days=365.25)


def age_in_years(record: PatientRecord, now: datetime) -> Optional[int]:
    """Whole years between date of birth and ``now``.

    Computed as ``floor((now - date_of_birth) / 365.25 days)``.

    Args:
        record: Patient record
        now: Aware reference instant

    Returns:
        Age in whole years, or None when the date of birth does not parse
    """
    birth = record.birth_date
    if birth is None:
        return None
    return (now - birth) // YEAR_LENGTH


def created_date(created_at: Optional[str]) -> Optional[str]:
    """ISO calendar date (UTC) of a creation timestamp, None if unparseable."""
    instant = parse_instant(created_at)
    if instant is None:
        return None
    return instant.date().isoformat()


@dataclass(frozen=True)
class Row:
    """Display-ready projection of a record.

    Attributes:
        record: The underlying record, unmodified
        age: Whole years since date of birth
        created_date: ISO date portion of ``created_at``
    """

    record: PatientRecord
    age: Optional[int]
    created_date: Optional[str]

    @property
    def age_display(self) -> str:
        if self.age is None:
            return ""
        return f"{self.age} yrs"

    @property
    def created_full(self) -> Optional[str]:
        """Full creation timestamp, shown as a tooltip next to the date."""
        return self.record.created_at

    def to_dict(self) -> dict:
        """Export the row as a flat dictionary of display values."""
        values = self.record.to_payload()
        values.setdefault("id", None)
        values.setdefault("created_at", None)
        values["age"] = self.age
        values["created_date"] = self.created_date
        return values


def build_row(record: PatientRecord, now: datetime) -> Row:
    return Row(
        record=record,
        age=age_in_years(record, now),
        created_date=created_date(record.created_at),
    )
