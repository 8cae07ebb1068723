"""Patient record CLI commands for Patient Dashboard.

This module provides the ``records`` command group: adding a validated
record, listing the sorted and filtered table, and bulk CSV import.
"""

import json as json_lib
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import click

from patient_dashboard.config import Config, get_store_api_key
from patient_dashboard.csv_parser import export_rows, import_records
from patient_dashboard.dashboard import DashboardSession
from patient_dashboard.models.record import Status
from patient_dashboard.store import RecordStore, RestRecordStore
from patient_dashboard.utils.exceptions import StoreError, ValidationError, remediation_for
from patient_dashboard.view import (
    AGE_OPERATORS,
    FILTER_AGE,
    FILTER_ALL,
    TEXT_OPERATORS,
    VIEW_FIELDS,
    EmptyState,
    Row,
    SortSpec,
    ViewSpec,
)
from patient_dashboard.view.spec import default_operator, operators_for

logger = logging.getLogger(__name__)

TABLE_COLUMNS = [
    ("First", lambda row: row.record.first_name),
    ("Middle", lambda row: row.record.middle_name or ""),
    ("Last", lambda row: row.record.last_name),
    ("DOB", lambda row: row.record.date_of_birth),
    ("Age", lambda row: row.age_display),
    ("Status", lambda row: row.record.status),
    ("City", lambda row: row.record.city),
    ("State", lambda row: row.record.state),
    ("ZIP", lambda row: row.record.zip_code),
    ("Created", lambda row: row.created_date or ""),
]


def build_store(config: Config) -> RecordStore:
    """Create the record store described by the configuration."""
    return RestRecordStore(config, api_key=get_store_api_key(config))


def format_table(rows: Sequence[Row]) -> str:
    """Render rows as a fixed-width text table."""
    header = [title for title, _ in TABLE_COLUMNS]
    cells = [[str(getter(row)) for _, getter in TABLE_COLUMNS] for row in rows]
    widths = [
        max(len(line[i]) for line in [header] + cells) for i in range(len(header))
    ]

    def render(line: list[str]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(line, widths)).rstrip()

    lines = [render(header), render(["-" * width for width in widths])]
    lines.extend(render(line) for line in cells)
    return "\n".join(lines)


def _report_store_error(e: StoreError) -> None:
    click.secho(f"Store Error: {e}", fg="red", err=True)
    click.echo(f"Remediation: {remediation_for(e)}", err=True)
    logger.error(f"Store error during {e.operation}: {e}")


@click.group()
def records() -> None:
    """Patient record commands (add, list, import)."""
    pass


@records.command("add")
@click.option("--first-name", default="", help="First name (required)")
@click.option("--middle-name", default="", help="Middle name")
@click.option("--last-name", default="", help="Last name (required)")
@click.option("--date-of-birth", "--dob", "date_of_birth", default="", help="Date of birth, YYYY-MM-DD (required)")
@click.option(
    "--status",
    type=click.Choice([status.value for status in Status]),
    default=None,
    help="Patient status (required)",
)
@click.option("--street-address", default="", help="Street address (required)")
@click.option("--city", default="", help="City (required)")
@click.option("--state", default="", help="US state, full name (required)")
@click.option("--zip-code", "--zip", "zip_code", default="", help="5-digit ZIP code (required)")
@click.option("--notes", default="", help="Free-text notes")
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON")
@click.pass_context
def add_record(ctx: click.Context, json_output: bool, **values: Optional[str]) -> None:
    """Validate and add one patient record.

    Every field is checked before anything is sent to the store; all invalid
    fields are reported together. Exits with code 1 when the record is
    rejected or the store fails.

    Examples:

        patient-dash records add --first-name Ada --last-name Lovelace \\
            --dob 1990-12-10 --status Active --street-address "1 Main St" \\
            --city Springfield --state Illinois --zip 62701
    """
    config: Config = ctx.obj["config"]
    values["status"] = values["status"] or ""

    store = build_store(config)
    try:
        session = DashboardSession(store)
        result = session.submit(values, refresh=False)
    except StoreError as e:
        _report_store_error(e)
        sys.exit(1)
    finally:
        store.close()

    if not result.succeeded:
        if json_output:
            click.echo(json_lib.dumps(result.outcome.to_dict(), indent=2))
        else:
            click.secho(result.outcome.format_report(), fg="red", err=True)
        sys.exit(1)

    record = result.record
    if json_output:
        click.echo(json_lib.dumps(record.to_payload(), indent=2))
    else:
        click.secho(
            f"✓ Added {record.first_name} {record.last_name} (id {record.id})",
            fg="green",
        )
    sys.exit(0)


@records.command("list")
@click.option(
    "--sort-by",
    type=click.Choice(list(VIEW_FIELDS)),
    default=None,
    help="Sort column (default from config: created_at)",
)
@click.option(
    "--desc/--asc",
    "descending",
    default=None,
    help="Sort direction (default from config: descending)",
)
@click.option(
    "--filter-field",
    type=click.Choice([FILTER_ALL, FILTER_AGE] + list(VIEW_FIELDS)),
    default=FILTER_ALL,
    show_default=True,
    help="Field to filter on",
)
@click.option(
    "--operator",
    type=click.Choice(list(TEXT_OPERATORS + AGE_OPERATORS)),
    default=None,
    help="contains/equals for text fields; =, >=, <= for age",
)
@click.option("--filter-value", default="", help="Filter value (empty shows everything)")
@click.option("--json", "json_output", is_flag=True, help="Output rows as JSON")
@click.option(
    "--export",
    "export_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write the displayed rows to a CSV file",
)
@click.pass_context
def list_records(
    ctx: click.Context,
    sort_by: Optional[str],
    descending: Optional[bool],
    filter_field: str,
    operator: Optional[str],
    filter_value: str,
    json_output: bool,
    export_path: Optional[Path],
) -> None:
    """List patient records, sorted and filtered like the dashboard table.

    Examples:

        # Newest first (default)
        patient-dash records list

        # Everyone aged 30 or more, by last name
        patient-dash records list --filter-field age --operator ">=" \\
            --filter-value 30 --sort-by last_name --asc

        # Free-text search over all text fields, exported to CSV
        patient-dash records list --filter-value spring --export patients.csv
    """
    config: Config = ctx.obj["config"]

    if operator is None:
        operator = default_operator(filter_field)
    elif operator not in operators_for(filter_field):
        click.secho(
            f"Operator '{operator}' is not valid for filter field '{filter_field}'. "
            f"Use one of: {', '.join(operators_for(filter_field))}",
            fg="red",
            err=True,
        )
        sys.exit(2)

    spec = ViewSpec(
        sort=SortSpec(
            field=sort_by or config.view.default_sort_field,
            descending=(
                config.view.default_sort_descending if descending is None else descending
            ),
        ),
        filter_field=filter_field,
        operator=operator,
        filter_value=filter_value,
    )

    store = build_store(config)
    try:
        session = DashboardSession(store, view_spec=spec)
        session.refresh()
    except StoreError as e:
        _report_store_error(e)
        sys.exit(1)
    finally:
        store.close()

    rows = session.rows

    if export_path:
        export_rows(rows, export_path)

    if json_output:
        click.echo(json_lib.dumps([row.to_dict() for row in rows], indent=2))
    elif session.empty_state is not EmptyState.NOT_EMPTY:
        click.secho(session.empty_state.value, fg="yellow")
    else:
        click.echo(format_table(rows))
        click.echo(f"\n{len(rows)} of {len(session.records)} patient(s)")

    if export_path and not json_output:
        click.echo(f"Rows exported to: {export_path}")

    sys.exit(0)


@records.command("import")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.pass_context
def import_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Import patient records from a CSV file.

    Columns are the record field names (first_name, last_name, date_of_birth,
    status, street_address, city, state, zip_code, and optionally middle_name
    and notes). Each row is validated; valid rows are inserted and invalid
    rows reported with their 1-indexed row number.

    Exits with code 1 if any row was rejected.

    Examples:

        patient-dash records import patients.csv

        patient-dash records import patients.csv --json
    """
    config: Config = ctx.obj["config"]

    store = build_store(config)
    try:
        logger.info(f"Importing CSV file: {file}")
        result = import_records(file, store)
    except ValidationError as e:
        click.secho(f"Validation Error: {e}", fg="red", err=True)
        logger.error(f"Validation error: {e}")
        sys.exit(1)
    except StoreError as e:
        _report_store_error(e)
        sys.exit(1)
    finally:
        store.close()

    if json_output:
        click.echo(json_lib.dumps(result.to_dict(), indent=2))
    elif result.has_errors:
        click.secho(result.format_report(), fg="yellow")
    else:
        click.secho(result.format_report(), fg="green")

    sys.exit(1 if result.has_errors else 0)
