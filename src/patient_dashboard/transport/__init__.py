"""HTTP transport helpers."""

from patient_dashboard.transport.http_client import create_session, request_timeout

__all__ = ["create_session", "request_timeout"]
