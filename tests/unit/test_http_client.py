"""Unit tests for the HTTP session factory."""

import requests

from patient_dashboard.config import TransportConfig
from patient_dashboard.transport import create_session, request_timeout


class TestCreateSession:
    """Tests for create_session."""

    def test_no_retries_by_default(self):
        """Test store calls are not retried unless configured."""
        # Act
        session = create_session(TransportConfig())

        # Assert
        adapter = session.get_adapter("https://db.example.com")
        assert adapter.max_retries.total == 0
        session.close()

    def test_retries_only_idempotent_methods(self):
        """Test configured retries never cover POST."""
        # Act
        session = create_session(TransportConfig(max_retries=3))

        # Assert
        retry = session.get_adapter("http://localhost").max_retries
        assert retry.total == 3
        assert "POST" not in retry.allowed_methods
        assert "GET" in retry.allowed_methods
        session.close()

    def test_tls_verification_flag(self, caplog):
        """Test verify_tls=False disables verification with a warning."""
        # Act
        session = create_session(TransportConfig(verify_tls=False))

        # Assert
        assert isinstance(session, requests.Session)
        assert session.verify is False
        assert "TLS certificate verification is DISABLED" in caplog.text
        session.close()


def test_request_timeout_tuple():
    """Test (connect, read) timeouts come from the transport config."""
    assert request_timeout(TransportConfig(timeout_connect=2, timeout_read=9)) == (2, 9)
