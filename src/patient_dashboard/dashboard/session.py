"""Dashboard session: form state, record snapshot and the current table view.

Single-threaded. The session holds one read-only snapshot of the persisted
records and one ViewSpec; the displayed rows are recomputed in full whenever
either changes and reused otherwise.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from patient_dashboard.logging_audit import get_logger, log_audit_event
from patient_dashboard.models.record import DRAFT_FIELDS, PatientRecord
from patient_dashboard.store.base import RecordStore
from patient_dashboard.utils.exceptions import StoreError
from patient_dashboard.validation.validator import (
    Accepted,
    ValidationOutcome,
    validate_record,
)
from patient_dashboard.view.pipeline import EmptyState, describe_empty, project
from patient_dashboard.view.projection import Row
from patient_dashboard.view.spec import ViewSpec

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DraftForm:
    """Values typed into the add-patient form.

    Attributes:
        values: Field name to raw value; every draft field starts empty
    """

    values: dict[str, Any] = field(default_factory=lambda: dict.fromkeys(DRAFT_FIELDS, ""))

    def update(self, **values: Any) -> None:
        unknown = set(values) - set(DRAFT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown form field(s): {', '.join(sorted(unknown))}")
        self.values.update(values)

    def reset(self) -> None:
        self.values = dict.fromkeys(DRAFT_FIELDS, "")


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of one form submission.

    Attributes:
        outcome: Validation outcome for the submitted values
        record: Persisted record when the submission succeeded
        form_open: Whether the form stays open after this submission
    """

    outcome: ValidationOutcome
    record: Optional[PatientRecord] = None
    form_open: bool = True

    @property
    def succeeded(self) -> bool:
        return self.record is not None


class DashboardSession:
    """Owns the record snapshot, the ViewSpec and the draft form.

    Attributes:
        store: Backing record store
        form: Current draft form values
        clock: Callable returning the aware "now" used for validation and ages

    Example:
        >>> session = DashboardSession(InMemoryRecordStore())
        >>> session.refresh()
        >>> session.form.update(first_name="Ada", ...)
        >>> result = session.submit()
        >>> rows = session.rows
    """

    def __init__(
        self,
        store: RecordStore,
        view_spec: Optional[ViewSpec] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.clock = clock
        self.form = DraftForm()
        self._records: tuple[PatientRecord, ...] = ()
        self._view_spec = view_spec or ViewSpec()
        self._rows: Optional[list[Row]] = None
        self.recompute_count = 0

    @property
    def records(self) -> tuple[PatientRecord, ...]:
        return self._records

    @property
    def view_spec(self) -> ViewSpec:
        return self._view_spec

    @property
    def rows(self) -> list[Row]:
        """Displayed rows, recomputed only after the records or ViewSpec changed."""
        if self._rows is None:
            self._rows = project(self._records, self._view_spec, now=self.clock())
            self.recompute_count += 1
        return self._rows

    @property
    def empty_state(self) -> EmptyState:
        return describe_empty(len(self._records), self.rows)

    def set_view_spec(self, spec: ViewSpec) -> None:
        if spec != self._view_spec:
            self._view_spec = spec
            self._rows = None

    def toggle_sort(self, field_name: str) -> None:
        self.set_view_spec(self._view_spec.toggle_sort(field_name))

    def clear_sort(self) -> None:
        self.set_view_spec(self._view_spec.clear_sort())

    def set_filter_field(self, filter_field: str) -> None:
        self.set_view_spec(self._view_spec.with_filter_field(filter_field))

    def set_operator(self, operator: str) -> None:
        self.set_view_spec(self._view_spec.with_operator(operator))

    def set_filter_value(self, filter_value: str) -> None:
        self.set_view_spec(self._view_spec.with_filter_value(filter_value))

    def refresh(self) -> None:
        """Replace the snapshot with the store's current records.

        Raises:
            StoreError: If the store cannot be read; the previous snapshot is kept
        """
        start_time = time.time()
        try:
            records = self.store.select_all()
        except StoreError as e:
            log_audit_event(
                "STORE_FAILED",
                {"status": "failure", "operation": e.operation, "error_message": str(e)},
            )
            raise

        self._records = tuple(records)
        self._rows = None
        log_audit_event(
            "RECORDS_REFRESHED",
            {
                "status": "success",
                "record_count": len(self._records),
                "duration": time.time() - start_time,
            },
        )

    def submit(
        self,
        values: Optional[Mapping[str, Any]] = None,
        keep_open: bool = False,
        refresh: bool = True,
    ) -> SubmitResult:
        """Validate and persist the draft, then refresh the view.

        "Add" and "Add & Keep Open" are the same operation; ``keep_open``
        only decides whether the form stays open afterwards. On success the
        form is cleared; on rejection or store failure it keeps its values.
        A failed reload after a successful insert is logged, not raised.

        Args:
            values: Field values to merge into the form before submitting
            keep_open: Keep the form open after a successful submission
            refresh: Reload the records from the store after inserting

        Returns:
            SubmitResult; ``outcome`` is Rejected when validation failed

        Raises:
            StoreError: If the insert fails
        """
        if values:
            self.form.update(**values)

        outcome = validate_record(self.form.values, now=self.clock())
        if not isinstance(outcome, Accepted):
            log_audit_event(
                "RECORD_REJECTED",
                {
                    "status": "rejected",
                    "error_count": len(outcome.field_errors),
                    "fields": ",".join(outcome.field_errors),
                },
            )
            return SubmitResult(outcome=outcome, form_open=True)

        start_time = time.time()
        try:
            persisted = self.store.insert(outcome.record)
        except StoreError as e:
            log_audit_event(
                "STORE_FAILED",
                {"status": "failure", "operation": e.operation, "error_message": str(e)},
            )
            raise

        log_audit_event(
            "RECORD_SUBMITTED",
            {
                "status": "success",
                "record_id": persisted.id,
                "duration": time.time() - start_time,
            },
        )
        self.form.reset()
        result = SubmitResult(outcome=outcome, record=persisted, form_open=keep_open)
        if not refresh:
            return result

        # The record is persisted; a failed reload only leaves the view stale
        try:
            self.refresh()
        except StoreError as e:
            logger.warning(
                f"Record {persisted.id} was saved but the view could not be reloaded: {e}"
            )
        return result
