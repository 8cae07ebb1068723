"""Audit trail functionality for Patient Dashboard.

This module provides structured audit logging for record submissions, store
reads and bulk imports.
"""

import time
import uuid
from typing import Any, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)

FIELD_ORDER = [
    "status",
    "operation",
    "record_id",
    "record_count",
    "error_count",
    "fields",
    "duration",
    "error_message",
    "correlation_id",
]


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Audit events are logged at INFO level, or ERROR level when
    ``details["status"]`` is ``"failure"``.

    Args:
        event_type: Type of operation (e.g., "RECORD_SUBMITTED", "RECORD_REJECTED",
                   "RECORDS_REFRESHED", "CSV_IMPORTED", "STORE_FAILED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - record_id: Store-assigned id of the affected record
                - record_count: Number of records involved
                - fields: Comma-separated invalid field names
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)
                - correlation_id: Optional correlation ID for tracking related events

    Example:
        >>> log_audit_event("RECORD_SUBMITTED", {
        ...     "status": "success",
        ...     "record_id": "7f0c...",
        ...     "duration": 0.12
        ... })
    """
    details = dict(details)
    details.setdefault("timestamp", time.time())
    details.setdefault("correlation_id", str(uuid.uuid4()))

    message_parts = [f"AUDIT [{event_type}]"]

    for field in FIELD_ORDER:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in FIELD_ORDER and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)


def log_transaction(
    operation: str,
    request: str,
    response: Optional[str],
    status: str = "success",
) -> None:
    """Log a store round trip with request and response bodies.

    The header line is logged at INFO; full bodies at DEBUG since they carry
    patient data.

    Args:
        operation: Store operation (e.g., "insert", "select_all")
        request: Request body or query
        response: Response body, None when no response was received
        status: Transaction status ("success" or "failure")
    """
    correlation_id = str(uuid.uuid4())
    response_text = response or ""

    logger.info(
        f"TRANSACTION [{operation}] | "
        f"status={status} | "
        f"correlation_id={correlation_id} | "
        f"request_size={len(request)} bytes | "
        f"response_size={len(response_text)} bytes"
    )
    logger.debug(
        f"TRANSACTION REQUEST [{operation}] | correlation_id={correlation_id}\n{request}"
    )
    logger.debug(
        f"TRANSACTION RESPONSE [{operation}] | correlation_id={correlation_id}\n{response_text}"
    )
