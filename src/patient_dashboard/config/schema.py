"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from patient_dashboard.view.spec import VIEW_FIELDS

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class StoreConfig(BaseModel):
    """Configuration for the REST record store.

    Attributes:
        base_url: Store base URL; rows live under ``/rest/v1/<table>``
        table: Table holding patient rows
        api_key_env_var: Environment variable holding the store API key
    """

    base_url: str = Field(
        default="http://localhost:8080",
        description="Record store base URL",
    )
    table: str = Field(default="patients", min_length=1, description="Patient table name")
    api_key_env_var: str = Field(
        default="PATIENT_DASH_STORE_API_KEY",
        description="Environment variable for the store API key",
    )

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL is valid HTTP/HTTPS.

        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid URL: {v}. Must start with http:// or https://"
            )
        return v.rstrip("/")


class TransportConfig(BaseModel):
    """Configuration for HTTP/HTTPS transport.

    Attributes:
        verify_tls: Whether to verify TLS certificates
        timeout_connect: Connection timeout in seconds
        timeout_read: Read timeout in seconds
        max_retries: Retry attempts for failed requests (store calls are not retried by default)
        backoff_factor: Exponential backoff factor for retries
    """

    verify_tls: bool = True
    timeout_connect: int = Field(default=10, ge=1, description="Connection timeout in seconds")
    timeout_read: int = Field(default=30, ge=1, description="Read timeout in seconds")
    max_retries: int = Field(default=0, ge=0, description="Maximum retry attempts")
    backoff_factor: float = Field(default=0.3, ge=0.0, description="Exponential backoff factor")


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact PII from logs
    """

    level: str = Field(default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL")
    log_file: Path = Field(default=Path("logs/patient-dash.log"), description="Log file path")
    redact_pii: bool = Field(default=False, description="Redact PII from logs")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level and normalize it to uppercase.

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class ViewConfig(BaseModel):
    """Initial table view settings.

    Attributes:
        default_sort_field: Column the table is sorted by on load
        default_sort_descending: Direction of the initial sort
    """

    default_sort_field: str = Field(default="created_at", description="Initial sort column")
    default_sort_descending: bool = Field(default=True, description="Initial sort direction")

    @field_validator("default_sort_field")
    @classmethod
    def validate_sort_field(cls, v: str) -> str:
        if v not in VIEW_FIELDS:
            raise ValueError(
                f"Invalid default_sort_field: {v}. Must be one of: {', '.join(VIEW_FIELDS)}"
            )
        return v


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        store: Record store connection settings
        transport: HTTP/HTTPS transport configuration
        logging: Logging configuration
        view: Initial table view settings

    Example:
        >>> config = Config(store=StoreConfig(base_url="https://db.example.com"))
        >>> config.store.table
        'patients'
    """

    store: StoreConfig = StoreConfig()
    transport: TransportConfig = TransportConfig()
    logging: LoggingConfig = LoggingConfig()
    view: ViewConfig = ViewConfig()
