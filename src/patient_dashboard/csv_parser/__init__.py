"""CSV import and export of patient records."""

from patient_dashboard.csv_parser.exporter import export_rows
from patient_dashboard.csv_parser.parser import (
    ImportIssue,
    ImportResult,
    import_records,
    read_candidates,
)

__all__ = [
    "ImportIssue",
    "ImportResult",
    "export_rows",
    "import_records",
    "read_candidates",
]
