"""REST record store speaking the PostgREST row API.

Rows live at ``{base_url}/rest/v1/{table}``:

- ``POST`` with ``Prefer: return=representation`` inserts a row and returns it
  (as a one-element JSON array);
- ``GET ?select=*`` returns every row as a JSON array.

The API key, when configured, is sent both as ``apikey`` and as a bearer token.
"""

import json
import time
from typing import Any, Optional
from urllib.parse import urlparse

import requests

from patient_dashboard.config.schema import Config
from patient_dashboard.logging_audit import get_logger, log_transaction
from patient_dashboard.models.record import PatientRecord
from patient_dashboard.store.base import RecordStore
from patient_dashboard.transport.http_client import create_session, request_timeout
from patient_dashboard.utils.exceptions import StoreError

logger = get_logger(__name__)

LOOPBACK_HOSTS = ("localhost", "127.0.0.1", "::1")


class RestRecordStore(RecordStore):
    """Record store backed by a PostgREST-compatible HTTP endpoint.

    Attributes:
        config: Application configuration
        table_url: Full URL of the patient table
        session: Configured requests session

    Example:
        >>> store = RestRecordStore(load_config(), api_key=os.getenv("KEY"))
        >>> records = store.select_all()
        >>> store.close()
    """

    def __init__(
        self,
        config: Config,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.table_url = f"{config.store.base_url}/rest/v1/{config.store.table}"
        self.timeout = request_timeout(config.transport)
        self.session = session or create_session(config.transport)

        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update(
                {"apikey": api_key, "Authorization": f"Bearer {api_key}"}
            )

        parsed = urlparse(self.table_url)
        if parsed.scheme == "http" and parsed.hostname not in LOOPBACK_HOSTS:
            logger.warning(
                "SECURITY WARNING: Using HTTP transport (not HTTPS) for the record store. "
                "Patient data is sent unencrypted."
            )

        logger.info(f"REST record store initialized: {self.table_url}")

    def insert(self, record: PatientRecord) -> PatientRecord:
        body = json.dumps(record.to_payload())
        start_time = time.time()
        payload = self._request(
            "insert",
            "POST",
            data=body,
            headers={
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
        )

        row = payload
        if isinstance(payload, list):
            row = payload[0] if len(payload) == 1 else None
        if not isinstance(row, dict):
            raise StoreError(
                "Store returned an unexpected insert response (expected one row)",
                operation="insert",
            )

        persisted = PatientRecord.from_payload(row)
        duration = time.time() - start_time
        logger.info(f"Record inserted: id={persisted.id} ({duration:.2f}s)")
        return persisted

    def select_all(self) -> list[PatientRecord]:
        rows = self._request("select_all", "GET", params={"select": "*"})
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise StoreError(
                "Store returned an unexpected select response (expected a list of rows)",
                operation="select_all",
            )
        return [PatientRecord.from_payload(row) for row in rows]

    def close(self) -> None:
        self.session.close()

    def _request(self, operation: str, method: str, **kwargs: Any) -> Any:
        """Send one request and decode the JSON body.

        Raises:
            StoreError: On transport failure, HTTP error status or non-JSON body
        """
        request_text = kwargs.get("data") or json.dumps(kwargs.get("params", {}))
        try:
            response = self.session.request(
                method, self.table_url, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            log_transaction(operation, request_text, None, status="failure")
            raise StoreError(
                f"Store {operation} failed: {e}", operation=operation
            ) from e

        log_transaction(
            operation,
            request_text,
            response.text,
            status="success" if response.ok else "failure",
        )

        if not response.ok:
            raise StoreError(
                f"Store {operation} failed with HTTP {response.status_code}: "
                f"{response.text[:200]}",
                operation=operation,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise StoreError(
                f"Store {operation} returned a non-JSON body", operation=operation,
                status_code=response.status_code,
            ) from e
