"""Unit tests for mock CLI commands."""

import json
from unittest.mock import Mock, patch

import requests
from click.testing import CliRunner

from patient_dashboard.cli.main import cli


@patch("patient_dashboard.cli.main.configure_logging")
@patch("patient_dashboard.cli.mock_commands.run_server")
def test_start_uses_cli_overrides(mock_run_server, _mock_logging, tmp_path):
    """Test mock start passes host and port overrides to run_server."""
    # Arrange
    config_file = tmp_path / "mock.json"
    config_file.write_text(json.dumps({"table": "people"}))

    # Act
    result = CliRunner().invoke(
        cli,
        ["mock", "start", "--host", "0.0.0.0", "--port", "9090", "--config", str(config_file)],
    )

    # Assert
    assert result.exit_code == 0
    assert "http://0.0.0.0:9090" in result.output
    kwargs = mock_run_server.call_args.kwargs
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9090
    assert kwargs["config"].table == "people"


@patch("patient_dashboard.cli.main.configure_logging")
@patch("patient_dashboard.cli.mock_commands.run_server")
def test_start_invalid_config(mock_run_server, _mock_logging, tmp_path):
    """Test an invalid mock configuration exits 1 without starting."""
    # Arrange
    config_file = tmp_path / "mock.json"
    config_file.write_text(json.dumps({"port": 0}))

    # Act
    result = CliRunner().invoke(cli, ["mock", "start", "--config", str(config_file)])

    # Assert
    assert result.exit_code == 1
    assert "Invalid mock server configuration" in result.output
    mock_run_server.assert_not_called()


@patch("patient_dashboard.cli.main.configure_logging")
@patch("patient_dashboard.cli.mock_commands.requests.get")
def test_status_healthy(mock_get, _mock_logging):
    """Test mock status prints the health document."""
    # Arrange
    response = Mock()
    response.json.return_value = {"status": "healthy", "row_count": 2}
    mock_get.return_value = response

    # Act
    result = CliRunner().invoke(cli, ["mock", "status", "--url", "http://localhost:9090/"])

    # Assert
    assert result.exit_code == 0
    assert "Mock store is healthy" in result.output
    mock_get.assert_called_once_with("http://localhost:9090/health", timeout=5)


@patch("patient_dashboard.cli.main.configure_logging")
@patch("patient_dashboard.cli.mock_commands.requests.get")
def test_status_unreachable(mock_get, _mock_logging):
    """Test mock status exits 1 when the server is down."""
    # Arrange
    mock_get.side_effect = requests.ConnectionError("refused")

    # Act
    result = CliRunner().invoke(cli, ["mock", "status"])

    # Assert
    assert result.exit_code == 1
    assert "not reachable" in result.output
