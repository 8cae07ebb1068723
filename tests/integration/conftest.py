"""Integration test fixtures and configuration.

This module provides fixtures for integration tests, including a live mock
record store served by werkzeug on a free port in a background thread.
"""

import logging
import socket
import threading
import time
from typing import Generator

import pytest
import requests
from werkzeug.serving import make_server

from patient_dashboard.config import Config, StoreConfig
from patient_dashboard.mock_server.app import app, initialize_app, reset_store
from patient_dashboard.mock_server.config import MockServerConfig

logger = logging.getLogger(__name__)


# =============================================================================
# Utility Functions
# =============================================================================


def find_free_port() -> int:
    """Find an available port on localhost.

    Returns:
        int: An available port number.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        port = s.getsockname()[1]
    return port


def wait_for_server(url: str, timeout: float = 10.0, interval: float = 0.1) -> bool:
    """Wait for server to become available.

    Args:
        url: URL to check (e.g., health endpoint).
        timeout: Maximum time to wait in seconds.
        interval: Time between checks in seconds.

    Returns:
        bool: True if server became available, False if timeout.
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            response = requests.get(url, timeout=1)
            if response.status_code == 200:
                return True
        except requests.exceptions.RequestException:
            pass
        time.sleep(interval)
    return False


# =============================================================================
# Mock Server Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def mock_server_config(tmp_path_factory) -> MockServerConfig:
    """Session-scoped mock server configuration.

    Returns:
        MockServerConfig: Configuration for mock server.
    """
    return MockServerConfig(
        host="127.0.0.1",
        port=find_free_port(),
        log_level="WARNING",  # Reduce log noise during tests
        log_path=str(tmp_path_factory.mktemp("mock-logs") / "mock-store.log"),
    )


@pytest.fixture(scope="session")
def mock_server(mock_server_config: MockServerConfig) -> Generator[str, None, None]:
    """Start the mock store once per session and yield its base URL.

    Usage:
        def test_against_mock_server(mock_server):
            response = requests.get(f"{mock_server}/health")
    """
    initialize_app(mock_server_config)
    server = make_server(mock_server_config.host, mock_server_config.port, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    base_url = f"http://{mock_server_config.host}:{mock_server_config.port}"
    if not wait_for_server(f"{base_url}/health"):
        server.shutdown()
        pytest.fail(f"Mock server failed to start at {base_url}")

    logger.info(f"Mock server started at {base_url}")
    yield base_url

    server.shutdown()
    thread.join(timeout=5)
    logger.info("Mock server stopped")


@pytest.fixture
def empty_store(mock_server: str) -> str:
    """Base URL of the mock store with every row removed."""
    reset_store()
    return mock_server


@pytest.fixture
def store_config(empty_store: str) -> Config:
    """Application configuration pointing at the empty mock store."""
    return Config(store=StoreConfig(base_url=empty_store))
