"""Record view engine: ViewSpec, filter/sort pipeline and display rows."""

from patient_dashboard.view.pipeline import (
    EmptyState,
    describe_empty,
    filter_records,
    project,
    sort_records,
)
from patient_dashboard.view.projection import Row, age_in_years, created_date
from patient_dashboard.view.spec import (
    AGE_OPERATORS,
    FILTER_AGE,
    FILTER_ALL,
    TEXT_OPERATORS,
    VIEW_FIELDS,
    SortSpec,
    ViewSpec,
)

__all__ = [
    "AGE_OPERATORS",
    "FILTER_AGE",
    "FILTER_ALL",
    "TEXT_OPERATORS",
    "VIEW_FIELDS",
    "EmptyState",
    "Row",
    "SortSpec",
    "ViewSpec",
    "age_in_years",
    "created_date",
    "describe_empty",
    "filter_records",
    "project",
    "sort_records",
]
