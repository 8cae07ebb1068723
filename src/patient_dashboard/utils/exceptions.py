"""Custom exception classes for Patient Dashboard.

All exceptions inherit from DashboardError to allow catching all custom exceptions.
"""

from typing import Optional

import requests


class DashboardError(Exception):
    """Base exception for all Patient Dashboard custom exceptions."""

    pass


class ValidationError(DashboardError):
    """Raised when a draft record fails schema validation.

    Field-scoped and recoverable: the draft never reaches the store and the
    caller can re-edit and resubmit.

    Attributes:
        field_errors: Mapping of field name to human-readable reason
    """

    def __init__(self, message: str, field_errors: Optional[dict[str, str]] = None) -> None:
        super().__init__(message)
        self.field_errors: dict[str, str] = dict(field_errors or {})


class StoreError(DashboardError):
    """Raised when the backing store fails an insert or select.

    Operation-scoped and recoverable. Never retried by the core; prior state
    (draft values, current view) is left intact so the user can retry.

    Examples:
        - Connection refused or timed out
        - HTTP error responses from the store
        - Malformed response body

    Attributes:
        operation: Store operation that failed ("insert" or "select_all")
        status_code: HTTP status code when the failure came from a response
    """

    def __init__(
        self,
        message: str,
        operation: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class ConfigurationError(DashboardError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Missing required configuration
        - Invalid configuration file format
        - Configuration value out of range
    """

    pass


def remediation_for(exception: Exception) -> str:
    """Generate actionable remediation message for an error.

    Args:
        exception: Exception that occurred

    Returns:
        Actionable remediation message

    Example:
        >>> remediation_for(StoreError("refused", operation="insert"))
        'Cannot reach the record store. ...'
    """
    if isinstance(exception, StoreError):
        cause = exception.__cause__
        if isinstance(cause, requests.Timeout):
            return (
                "Store request timed out. Consider increasing timeout_read in "
                "config.json or checking store performance."
            )
        if exception.status_code in (401, 403):
            return (
                "Store rejected the credentials. Check the API key environment "
                "variable named by store.api_key_env_var."
            )
        if exception.status_code is not None:
            return (
                f"Store answered HTTP {exception.status_code}. Check the table name "
                "and store logs, then retry."
            )
        return (
            "Cannot reach the record store. Check: 1) store.base_url in config.json, "
            "2) the store is running (patient-dash mock start for local use)."
        )

    if isinstance(exception, ValidationError):
        return "Fix the fields listed above and submit again."

    if isinstance(exception, ConfigurationError):
        return (
            "Configuration error. Check config.json for missing or invalid values. "
            "Use patient-dash config validate to inspect it."
        )

    return "Review error message and check the log file for complete details."
