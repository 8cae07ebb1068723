"""In-process record store."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from patient_dashboard.logging_audit import get_logger
from patient_dashboard.models.record import PatientRecord
from patient_dashboard.store.base import RecordStore

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecordStore(RecordStore):
    """Keeps rows in a list for the lifetime of the process.

    Assigns a uuid4 ``id`` and an ISO-8601 UTC ``created_at`` on insert, the
    same way the REST store's backend does.

    Attributes:
        clock: Callable returning the aware instant used for ``created_at``
    """

    def __init__(
        self,
        records: Optional[list[PatientRecord]] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._rows: list[PatientRecord] = list(records or [])
        self.clock = clock

    def insert(self, record: PatientRecord) -> PatientRecord:
        persisted = replace(
            record,
            id=str(uuid.uuid4()),
            created_at=self.clock().isoformat(),
        )
        self._rows.append(persisted)
        logger.debug(f"Stored record {persisted.id} ({len(self._rows)} total)")
        return persisted

    def select_all(self) -> list[PatientRecord]:
        return list(self._rows)
