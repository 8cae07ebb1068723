"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from patient_dashboard.models.record import PatientRecord

# Fixed reference instant so age and date-of-birth checks are deterministic
FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def now() -> datetime:
    """Fixed, timezone-aware "now" used for validation and age math."""
    return FIXED_NOW


@pytest.fixture
def clock(now: datetime) -> Callable[[], datetime]:
    """Clock callable returning the fixed "now"."""
    return lambda: now


@pytest.fixture
def valid_draft() -> dict[str, str]:
    """
    Form values that pass every validation rule.

    Returns:
        dict: Field name to raw form value.
    """
    return {
        "first_name": "Ada",
        "middle_name": "",
        "last_name": "Lovelace",
        "date_of_birth": "1990-12-10",
        "status": "Active",
        "street_address": "12 St James's Square",
        "city": "Springfield",
        "state": "Illinois",
        "zip_code": "62701",
        "notes": "",
    }


@pytest.fixture
def make_record() -> Callable[..., PatientRecord]:
    """
    Factory for persisted records with sensible defaults.

    Usage:
        def test_something(make_record):
            record = make_record(last_name="Smith", created_at="2024-01-15T10:00:00Z")
    """
    counter = {"value": 0}

    def _make(**overrides: Any) -> PatientRecord:
        counter["value"] += 1
        values = {
            "id": f"rec-{counter['value']}",
            "first_name": "Test",
            "last_name": "Patient",
            "date_of_birth": "1980-01-01",
            "status": "Active",
            "street_address": "1 Main St",
            "city": "Springfield",
            "state": "Illinois",
            "zip_code": "62701",
            "created_at": f"2024-01-{counter['value']:02d}T09:00:00+00:00",
        }
        values.update(overrides)
        return PatientRecord(**values)

    return _make
