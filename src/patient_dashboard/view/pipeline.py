"""Sort/filter pipeline turning the record set into displayed rows.

The pipeline is a pure function of its inputs: the record set, the ViewSpec
and the reference instant used for age math. It never raises for malformed
record data; values that do not parse simply fail to match and sort as the
smallest value.
"""

import unicodedata
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from patient_dashboard.logging_audit import get_logger
from patient_dashboard.models.record import PatientRecord, parse_instant
from patient_dashboard.view.projection import Row, age_in_years, build_row, created_date
from patient_dashboard.view.spec import (
    AGE_OPERATORS,
    DATE_FIELDS,
    FILTER_AGE,
    FILTER_ALL,
    VIEW_FIELDS,
    SortSpec,
    ViewSpec,
)

logger = get_logger(__name__)

# Fields searched by the "all" filter; created_at is matched on its date portion
SEARCH_ALL_FIELDS = tuple(
    name for name in VIEW_FIELDS if name not in ("date_of_birth", "created_at")
)


class EmptyState(Enum):
    """Why the table shows no rows."""

    NOT_EMPTY = ""
    NO_RECORDS = "No patients yet."
    NO_MATCHES = "No patients match the current filter."


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _parse_number(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


def _matches_all(record: PatientRecord, needle: str) -> bool:
    for name in SEARCH_ALL_FIELDS:
        if needle in _text(record.get(name)).lower():
            return True
    created = created_date(record.created_at)
    return created is not None and needle in created.lower()


def _matches_age(record: PatientRecord, operator: str, raw_value: str, now: datetime) -> bool:
    threshold = _parse_number(raw_value)
    if threshold is None or operator not in AGE_OPERATORS:
        return False
    age = age_in_years(record, now)
    if age is None:
        return False
    if operator == "=":
        return age == threshold
    if operator == ">=":
        return age >= threshold
    return age <= threshold


def _matches_field(record: PatientRecord, field_name: str, operator: str, needle: str) -> bool:
    if field_name not in VIEW_FIELDS:
        return False
    haystack = _text(record.get(field_name)).lower()
    if operator == "contains":
        return needle in haystack
    if operator == "equals":
        return haystack == needle
    return False


def filter_records(
    records: Sequence[PatientRecord],
    spec: ViewSpec,
    now: Optional[datetime] = None,
) -> list[PatientRecord]:
    """Keep the records matching the ViewSpec filter.

    An empty filter value, or an empty record set, returns the records
    unchanged without examining them.

    Args:
        records: Full record set
        spec: Current view parameters
        now: Reference instant for age filters (defaults to current UTC time)

    Returns:
        Matching records in input order
    """
    if not spec.filter_value or not records:
        return list(records)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    needle = spec.filter_value.lower()
    if spec.filter_field == FILTER_ALL:
        predicate: Callable[[PatientRecord], bool] = lambda r: _matches_all(r, needle)
    elif spec.filter_field == FILTER_AGE:
        predicate = lambda r: _matches_age(r, spec.operator, spec.filter_value, now)
    else:
        predicate = lambda r: _matches_field(r, spec.filter_field, spec.operator, needle)

    return [record for record in records if predicate(record)]


def _collation_key(value: Any) -> tuple[str, str]:
    """Case-insensitive, accent-folded key approximating locale collation."""
    folded = _text(value).casefold()
    base = "".join(
        char
        for char in unicodedata.normalize("NFKD", folded)
        if not unicodedata.combining(char)
    )
    return (base, folded)


def _chronological_key(value: Any) -> tuple[int, Any]:
    instant = parse_instant(value)
    if instant is None:
        return (0, "")
    return (1, instant)


def sort_records(records: Iterable[PatientRecord], sort: SortSpec) -> list[PatientRecord]:
    """Stable sort by the active key.

    Text fields compare case-insensitively; ``date_of_birth`` and
    ``created_at`` compare chronologically. Missing or unparseable values sort
    as the smallest value. Ties keep their input order in both directions.

    Args:
        records: Records to order
        sort: Active sort key

    Returns:
        New list in display order
    """
    if sort.field in DATE_FIELDS:
        key_for = _chronological_key
    else:
        key_for = _collation_key
    return sorted(records, key=lambda r: key_for(r.get(sort.field)), reverse=sort.descending)


def project(
    records: Iterable[PatientRecord],
    spec: ViewSpec,
    now: Optional[datetime] = None,
) -> list[Row]:
    """Derive the displayed rows from the full record set.

    Filter, then sort, then attach the display-only ``age`` and created-date
    values. Identical inputs always produce identical output.

    Args:
        records: Full record set (not modified)
        spec: Current view parameters
        now: Reference instant for age math (defaults to current UTC time)

    Returns:
        Ordered list of Row
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    snapshot = list(records)
    matched = filter_records(snapshot, spec, now=now)
    ordered = sort_records(matched, spec.sort)
    direction = "desc" if spec.sort.descending else "asc"
    logger.debug(
        f"Projected {len(ordered)} of {len(snapshot)} record(s) "
        f"(filter={spec.filter_field} {spec.operator} {spec.filter_value!r}, "
        f"sort={spec.sort.field} {direction})"
    )
    return [build_row(record, now) for record in ordered]


def describe_empty(record_count: int, rows: Sequence[Row]) -> EmptyState:
    """Classify an empty table as "no records at all" or "no matches"."""
    if rows:
        return EmptyState.NOT_EMPTY
    if record_count == 0:
        return EmptyState.NO_RECORDS
    return EmptyState.NO_MATCHES
