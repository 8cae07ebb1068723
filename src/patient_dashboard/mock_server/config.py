"""Configuration management for the mock store server."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_FILE = Path("mocks/config.json")


class MockServerConfig(BaseModel):
    """Mock server configuration model.

    Configuration precedence:
    1. Environment variables (MOCK_SERVER_* prefix)
    2. JSON config file
    3. Default values

    Attributes:
        host: Server host address
        port: HTTP port
        table: Table name served under /rest/v1/
        api_key: Required API key; None accepts any request
        log_level: Logging level
        log_path: Rotating log file path
        response_delay_ms: Delay added to every table request
        failure_rate: Probability of answering a table request with HTTP 503
    """

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8080, description="HTTP server port")
    table: str = Field(default="patients", min_length=1, description="Served table name")
    api_key: Optional[str] = Field(default=None, description="Required API key")
    log_level: str = Field(default="INFO", description="Logging level")
    log_path: str = Field(default="mocks/logs/mock-store.log", description="Log file path")
    response_delay_ms: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Response delay in milliseconds",
    )
    failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Probability of returning HTTP 503 (0.0-1.0)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Invalid port {v}. Must be between 1 and 65535.")
        return v


def load_config(config_file: Path | None = None) -> MockServerConfig:
    """Load mock server configuration from file and environment variables.

    Args:
        config_file: Path to configuration JSON file. Defaults to mocks/config.json

    Returns:
        MockServerConfig instance with merged configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_data = {}
    if config_file.exists():
        try:
            with open(config_file, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Failed to parse configuration file '{config_file}': {e}. "
                f"Ensure the file contains valid JSON."
            ) from e
    elif config_file != DEFAULT_CONFIG_FILE:
        # Only raise if non-default config file was explicitly specified
        raise FileNotFoundError(
            f"Configuration file not found: '{config_file}'. "
            f"Ensure the file exists or check the path."
        )

    env_prefix = "MOCK_SERVER_"
    for key in MockServerConfig.model_fields.keys():
        env_key = f"{env_prefix}{key.upper()}"
        if env_key in os.environ:
            config_data[key] = os.environ[env_key]

    # pydantic coerces numeric strings from the environment
    try:
        return MockServerConfig(**config_data)
    except ValueError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
