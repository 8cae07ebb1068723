"""Bulk import of draft patient records from CSV.

Each CSV row is a candidate draft keyed by the record's field names. Rows go
through the same schema validation as the form; accepted rows are inserted
into the store one by one and rejected rows are reported with every invalid
field, so a file can be fixed in one pass.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from patient_dashboard.logging_audit import get_logger, log_audit_event
from patient_dashboard.models.record import DRAFT_FIELDS, PatientRecord
from patient_dashboard.store.base import RecordStore
from patient_dashboard.utils.exceptions import ValidationError
from patient_dashboard.validation.validator import Rejected, validate_record

logger = get_logger(__name__)

# Store-assigned columns are accepted in the file but never imported
IGNORED_COLUMNS = ("id", "created_at")


@dataclass
class ImportIssue:
    """One invalid field in one CSV row.

    Attributes:
        row_number: 1-indexed row number (header is row 1)
        column_name: Field with the issue
        code: Validation error code
        message: Description of what's wrong
    """

    row_number: int
    column_name: str
    code: str
    message: str


@dataclass
class ImportResult:
    """Summary of a CSV import.

    Attributes:
        total_rows: Data rows read from the file
        imported: Records persisted by the store
        issues: Field-level problems of rejected rows
    """

    total_rows: int
    imported: list[PatientRecord] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)

    @property
    def rejected_rows(self) -> int:
        return len({issue.row_number for issue in self.issues})

    @property
    def has_errors(self) -> bool:
        return len(self.issues) > 0

    def format_report(self) -> str:
        """Format the import summary as a human-readable report."""
        lines = []
        lines.append("=" * 60)
        lines.append("CSV IMPORT REPORT")
        lines.append("=" * 60)
        lines.append(f"  Total rows:    {self.total_rows}")
        lines.append(f"  Imported:      {len(self.imported)}")
        lines.append(f"  Rejected rows: {self.rejected_rows}")

        if self.issues:
            lines.append("")
            lines.append(f"ERRORS ({len(self.issues)}):")
            for issue in self.issues[:20]:
                lines.append(
                    f"  Row {issue.row_number} [{issue.column_name}]: {issue.message}"
                )
            if len(self.issues) > 20:
                lines.append(f"  ... and {len(self.issues) - 20} more errors")

        lines.append("=" * 60)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "imported": len(self.imported),
            "rejected_rows": self.rejected_rows,
            "imported_ids": [record.id for record in self.imported],
            "errors": [
                {
                    "row_number": issue.row_number,
                    "column_name": issue.column_name,
                    "code": issue.code,
                    "message": issue.message,
                }
                for issue in self.issues
            ],
        }


def read_candidates(file_path: Path) -> list[dict[str, str]]:
    """Read candidate drafts from a CSV file.

    All cells are read as text (ZIP codes keep their leading zeros) and blank
    cells become empty strings. Columns that are not draft fields are ignored
    with a warning.

    Args:
        file_path: Path to a UTF-8 CSV file with a header row

    Returns:
        One dictionary per data row, keyed by draft field name

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file cannot be parsed or has no draft columns
    """
    if not file_path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    logger.info(f"Loading CSV from {file_path}")
    try:
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False, encoding="utf-8")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValidationError(
            f"Failed to read CSV file {file_path}. Ensure file is valid CSV with "
            f"UTF-8 encoding. Error: {e}"
        ) from e

    known = [column for column in df.columns if column in DRAFT_FIELDS]
    unknown = [
        column for column in df.columns
        if column not in DRAFT_FIELDS and column not in IGNORED_COLUMNS
    ]
    if unknown:
        logger.warning(
            f"CSV contains unknown columns that will be ignored: {', '.join(unknown)}"
        )
    if not known:
        raise ValidationError(
            f"CSV file {file_path} has no patient columns. "
            f"Expected some of: {', '.join(DRAFT_FIELDS)}"
        )

    return df[known].to_dict(orient="records")


def import_records(
    file_path: Path,
    store: RecordStore,
    now: Optional[datetime] = None,
) -> ImportResult:
    """Validate every CSV row and insert the accepted ones.

    Args:
        file_path: CSV file to import
        store: Destination store
        now: Evaluation instant for date-of-birth checks

    Returns:
        ImportResult with persisted records and per-field issues

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file cannot be parsed
        StoreError: If an insert fails; rows before it stay imported
    """
    start_time = time.time()
    candidates = read_candidates(file_path)
    result = ImportResult(total_rows=len(candidates))

    for index, candidate in enumerate(candidates):
        row_number = index + 2  # +1 for header, +1 for 1-indexed
        outcome = validate_record(candidate, now=now)
        if isinstance(outcome, Rejected):
            for name, error in outcome.field_errors.items():
                result.issues.append(
                    ImportIssue(
                        row_number=row_number,
                        column_name=name,
                        code=error.code.value,
                        message=error.message,
                    )
                )
            continue
        result.imported.append(store.insert(outcome.record))

    log_audit_event(
        "CSV_IMPORTED",
        {
            "status": "success",
            "input_file": str(file_path),
            "record_count": len(result.imported),
            "error_count": len(result.issues),
            "duration": time.time() - start_time,
        },
    )
    return result
