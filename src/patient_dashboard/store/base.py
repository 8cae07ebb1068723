"""Record store contract.

The store is the only persistence collaborator: ``insert`` is the sole write
path and ``select_all`` the sole read path. All sorting and filtering happens
in the view pipeline after full retrieval.
"""

from abc import ABC, abstractmethod

from patient_dashboard.models.record import PatientRecord


class RecordStore(ABC):
    """Insert/select contract implemented by every store backend."""

    @abstractmethod
    def insert(self, record: PatientRecord) -> PatientRecord:
        """Persist a draft record.

        Args:
            record: Validated draft (no ``id``/``created_at``)

        Returns:
            The persisted record with ``id`` and ``created_at`` assigned

        Raises:
            StoreError: If the store could not persist the record
        """

    @abstractmethod
    def select_all(self) -> list[PatientRecord]:
        """Return every persisted record, in store order.

        Raises:
            StoreError: If the store could not be read
        """

    def close(self) -> None:
        """Release resources held by the store."""
