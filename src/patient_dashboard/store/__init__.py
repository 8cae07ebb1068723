"""Record store collaborators."""

from patient_dashboard.store.base import RecordStore
from patient_dashboard.store.memory import InMemoryRecordStore
from patient_dashboard.store.rest import RestRecordStore

__all__ = ["InMemoryRecordStore", "RecordStore", "RestRecordStore"]
