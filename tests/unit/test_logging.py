"""Unit tests for logging_audit module."""

import logging
import re

import pytest

from patient_dashboard.logging_audit import (
    PIIRedactingFormatter,
    configure_logging,
    get_logger,
    log_audit_event,
    log_transaction,
)


def format_message(message: str, redact_pii: bool = True) -> str:
    """Format a single message through the PII formatter."""
    formatter = PIIRedactingFormatter(redact_pii=redact_pii)
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=message,
        args=(),
        exc_info=None,
    )
    return formatter.format(record)


class TestConfigureLogging:
    """Test logging configuration."""

    def test_configure_logging_creates_file(self, tmp_path):
        """Test logging configuration creates log file."""
        # Arrange
        log_file = tmp_path / "test.log"

        # Act
        configure_logging(level="INFO", log_file=log_file, redact_pii=False)
        get_logger(__name__).info("Test message")

        # Assert
        assert log_file.exists()
        assert "Test message" in log_file.read_text()

    def test_console_level_and_file_debug(self, tmp_path):
        """Test console uses the requested level while the file gets DEBUG."""
        # Arrange
        log_file = tmp_path / "test.log"

        # Act
        configure_logging(level="WARNING", log_file=log_file, redact_pii=False)
        get_logger(__name__).debug("Debug message")

        # Assert
        root_logger = logging.getLogger()
        console_handler = [
            h for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler) and not hasattr(h, "baseFilename")
        ][0]
        assert console_handler.level == logging.WARNING
        assert "Debug message" in log_file.read_text()

    def test_creates_nested_directory(self, tmp_path):
        """Test logging creates parent directories if needed."""
        # Arrange
        log_file = tmp_path / "nested" / "dir" / "test.log"

        # Act
        configure_logging(level="INFO", log_file=log_file)

        # Assert
        assert log_file.parent.exists()

    def test_invalid_level_raises_error(self, tmp_path):
        """Test invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", log_file=tmp_path / "test.log")

    def test_environment_variable_log_file(self, tmp_path, monkeypatch):
        """Test PATIENT_DASH_LOG_FILE is used when no file is given."""
        # Arrange
        env_log_file = tmp_path / "env.log"
        monkeypatch.setenv("PATIENT_DASH_LOG_FILE", str(env_log_file))

        # Act
        configure_logging(level="INFO", log_file=None)
        get_logger(__name__).info("From env")

        # Assert
        assert "From env" in env_log_file.read_text()

    def test_reconfigure_does_not_duplicate_handlers(self, tmp_path):
        """Test calling configure_logging twice leaves one handler pair."""
        # Arrange
        log_file = tmp_path / "test.log"

        # Act
        configure_logging(level="INFO", log_file=log_file)
        configure_logging(level="DEBUG", log_file=log_file)
        get_logger(__name__).info("Once")

        # Assert
        assert log_file.read_text().count("Once") == 1

    def test_log_format(self, tmp_path):
        """Test lines follow timestamp - module - level - message."""
        # Arrange
        log_file = tmp_path / "test.log"

        # Act
        configure_logging(level="INFO", log_file=log_file)
        get_logger(__name__).info("Formatted")

        # Assert
        pattern = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3} - .+ - INFO - Formatted"
        assert re.search(pattern, log_file.read_text())

    def test_rotation_config(self, tmp_path):
        """Test log rotation configuration (max size, backup count)."""
        # Act
        configure_logging(level="INFO", log_file=tmp_path / "test.log")

        # Assert
        file_handler = next(
            h for h in logging.getLogger().handlers if hasattr(h, "maxBytes")
        )
        assert file_handler.maxBytes == 10 * 1024 * 1024
        assert file_handler.backupCount == 5


class TestPIIRedactingFormatter:
    """Test PII redaction formatter."""

    def test_redacts_name_fields(self):
        """Test name=value pairs are masked."""
        # Act
        result = format_message("Saving first_name=Ada last_name='Lovelace'")

        # Assert
        assert "Ada" not in result
        assert "Lovelace" not in result
        assert result.count("[NAME-REDACTED]") == 2

    def test_redacts_patient_label(self):
        """Test 'Patient: First Last' is masked."""
        # Act
        result = format_message("Patient: Grace Hopper added")

        # Assert
        assert "Grace Hopper" not in result
        assert "Patient: [NAME-REDACTED]" in result

    def test_redacts_dob_and_zip(self):
        """Test dates of birth and ZIP codes are masked."""
        # Act
        result = format_message("date_of_birth=1990-12-10 zip_code=62701")

        # Assert
        assert "1990-12-10" not in result
        assert "62701" not in result
        assert "[DOB-REDACTED]" in result
        assert "[ZIP-REDACTED]" in result

    def test_redacts_json_body_fields(self):
        """Test PII inside a JSON request body is masked."""
        # Arrange
        body = (
            'TRANSACTION REQUEST [insert]\n{"first_name": "Ada", "middle_name": "Q", '
            '"last_name": "Lovelace", "date_of_birth": "1990-12-10", '
            '"city": "Springfield", "zip_code": "62701"}'
        )

        # Act
        result = format_message(body)

        # Assert
        for value in ("Ada", "Lovelace", "1990-12-10", "62701"):
            assert value not in result
        assert result.count("[NAME-REDACTED]") == 3
        assert '"date_of_birth": "[DOB-REDACTED]"' in result
        assert '"zip_code": "[ZIP-REDACTED]"' in result
        assert '"city": "Springfield"' in result

    def test_json_escaped_quote_masked_whole(self):
        """Test an escaped quote inside a name does not leak the remainder."""
        # Act
        result = format_message('{"last_name": "O\\"Brien"}')

        # Assert
        assert "Brien" not in result
        assert result.endswith('{"last_name": "[NAME-REDACTED]"}')

    def test_no_redaction_when_disabled(self):
        """Test PII is kept when redaction is off."""
        # Act
        result = format_message("first_name=Ada zip_code=62701", redact_pii=False)

        # Assert
        assert "first_name=Ada" in result
        assert "62701" in result

    def test_audit_fields_untouched(self):
        """Test non-PII audit fields survive redaction."""
        # Act
        result = format_message("AUDIT [RECORD_SUBMITTED] | status=success | record_count=3")

        # Assert
        assert "status=success" in result
        assert "record_count=3" in result


class TestLogAuditEvent:
    """Test audit trail logging."""

    def test_audit_event_success(self, tmp_path):
        """Test audit event fields are written in order."""
        # Arrange
        log_file = tmp_path / "test.log"
        configure_logging(level="INFO", log_file=log_file)

        # Act
        log_audit_event(
            "CSV_IMPORTED",
            {
                "input_file": "patients.csv",
                "record_count": 10,
                "status": "success",
                "duration": 2.5,
            },
        )

        # Assert
        content = log_file.read_text()
        assert "AUDIT [CSV_IMPORTED] | status=success | record_count=10" in content
        assert "duration=2.50s" in content
        assert "input_file=patients.csv" in content

    def test_failure_logged_as_error(self, tmp_path):
        """Test failure events are logged at ERROR level."""
        # Arrange
        log_file = tmp_path / "test.log"
        configure_logging(level="INFO", log_file=log_file)

        # Act
        log_audit_event(
            "STORE_FAILED",
            {"status": "failure", "operation": "insert", "error_message": "refused"},
        )

        # Assert
        content = log_file.read_text()
        assert "ERROR - AUDIT [STORE_FAILED]" in content
        assert "operation=insert" in content

    def test_caller_details_not_mutated(self):
        """Test the details mapping passed in is left unchanged."""
        # Arrange
        details = {"status": "success"}

        # Act
        log_audit_event("RECORDS_REFRESHED", details)

        # Assert
        assert details == {"status": "success"}

    def test_custom_correlation_id_preserved(self, tmp_path):
        """Test a caller-supplied correlation ID is kept."""
        # Arrange
        log_file = tmp_path / "test.log"
        configure_logging(level="INFO", log_file=log_file)

        # Act
        log_audit_event("RECORD_SUBMITTED", {"status": "success", "correlation_id": "abc-123"})

        # Assert
        assert "correlation_id=abc-123" in log_file.read_text()


class TestLogTransaction:
    """Test transaction logging."""

    def test_summary_and_bodies(self, tmp_path):
        """Test summary at INFO and full bodies at DEBUG share a correlation ID."""
        # Arrange
        log_file = tmp_path / "test.log"
        configure_logging(level="DEBUG", log_file=log_file)

        # Act
        log_transaction("insert", '{"last_name": "Doe"}', '[{"id": "1"}]', "success")

        # Assert
        content = log_file.read_text()
        assert "TRANSACTION [insert] | status=success" in content
        assert "TRANSACTION REQUEST [insert]" in content
        assert '[{"id": "1"}]' in content
        ids = set(re.findall(r"correlation_id=([0-9a-f-]{36})", content))
        assert len(ids) == 1

    def test_bodies_redacted_in_log_file(self, tmp_path):
        """Test redact_pii masks patient fields in logged request and response bodies."""
        # Arrange
        log_file = tmp_path / "test.log"
        configure_logging(level="INFO", log_file=log_file, redact_pii=True)
        request = '{"first_name": "Ada", "last_name": "Lovelace", "zip_code": "62701"}'
        response = '[{"id": "1", "date_of_birth": "1990-12-10", "last_name": "Lovelace"}]'

        # Act
        log_transaction("insert", request, response, "success")

        # Assert
        content = log_file.read_text()
        assert "TRANSACTION RESPONSE [insert]" in content
        for value in ("Ada", "Lovelace", "1990-12-10", "62701"):
            assert value not in content
        assert '"id": "1"' in content

    def test_missing_response(self, tmp_path):
        """Test a transport failure without a response logs zero bytes."""
        # Arrange
        log_file = tmp_path / "test.log"
        configure_logging(level="INFO", log_file=log_file)

        # Act
        log_transaction("select_all", "{}", None, status="failure")

        # Assert
        assert "response_size=0 bytes" in log_file.read_text()
