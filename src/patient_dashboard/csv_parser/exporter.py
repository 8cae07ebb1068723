"""Export of displayed table rows to CSV."""

from pathlib import Path
from typing import Sequence

import pandas as pd

from patient_dashboard.logging_audit import get_logger
from patient_dashboard.models.record import RECORD_FIELDS
from patient_dashboard.view.projection import Row

logger = get_logger(__name__)

EXPORT_COLUMNS = list(RECORD_FIELDS) + ["age", "created_date"]


def export_rows(rows: Sequence[Row], file_path: Path) -> int:
    """Write rows, in display order, to a CSV file.

    Args:
        rows: Displayed rows
        file_path: Destination path; parent directories are created

    Returns:
        Number of rows written
    """
    df = pd.DataFrame([row.to_dict() for row in rows], columns=EXPORT_COLUMNS)
    # Nullable integers so ages stay "42" instead of "42.0"
    df["age"] = df["age"].astype("Int64")

    file_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(file_path, index=False, encoding="utf-8")
    logger.info(f"Exported {len(df)} row(s) to {file_path}")
    return len(df)
