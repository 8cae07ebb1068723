"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from patient_dashboard.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from patient_dashboard.config.schema import Config
from patient_dashboard.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "PATIENT_DASH_"

# (environment suffix, section, key, parser)
_ENV_OVERRIDES: list[tuple[str, str, str, Any]] = [
    ("STORE_URL", "store", "base_url", str),
    ("STORE_TABLE", "store", "table", str),
    ("STORE_API_KEY_ENV_VAR", "store", "api_key_env_var", str),
    ("VERIFY_TLS", "transport", "verify_tls", "bool"),
    ("TIMEOUT_CONNECT", "transport", "timeout_connect", int),
    ("TIMEOUT_READ", "transport", "timeout_read", int),
    ("MAX_RETRIES", "transport", "max_retries", int),
    ("BACKOFF_FACTOR", "transport", "backoff_factor", float),
    ("LOG_LEVEL", "logging", "level", str),
    ("LOG_FILE", "logging", "log_file", str),
    ("REDACT_PII", "logging", "redact_pii", "bool"),
    ("DEFAULT_SORT_FIELD", "view", "default_sort_field", str),
    ("DEFAULT_SORT_DESCENDING", "view", "default_sort_descending", "bool"),
]


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (PATIENT_DASH_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> store_url = config.store.base_url
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object at the top level"
            )
        logger.info(f"Loaded configuration from {config_path}")
        return config_dict

    logger.info(f"Config file not found: {config_path}. Using default configuration.")
    # Deep copy so callers never mutate the defaults
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with PATIENT_DASH_ prefix.

    Environment variables follow the pattern: PATIENT_DASH_<NAME>, for example
    PATIENT_DASH_STORE_URL or PATIENT_DASH_LOG_LEVEL.

    Raises:
        ConfigurationError: If a numeric override does not parse
    """
    for suffix, section, key, parser in _ENV_OVERRIDES:
        raw = os.getenv(f"{ENV_PREFIX}{suffix}")
        if not raw:
            continue
        try:
            value = _parse_bool(raw) if parser == "bool" else parser(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {ENV_PREFIX}{suffix}: {raw!r}. Error: {e}"
            ) from e
        config_dict.setdefault(section, {})[key] = value
        logger.debug(f"Override: {key} from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when a store API key was written into the configuration file."""
    store = config_dict.get("store", {})
    if isinstance(store, dict) and "api_key" in store:
        logger.warning(
            "WARNING: Store API key found in configuration file! "
            "API keys should be stored in environment variables, not config files. "
            f"Use the variable named by store.api_key_env_var instead."
        )
        del store["api_key"]


def get_store_api_key(config: Config) -> Optional[str]:
    """Read the store API key from the environment variable named in config.

    Args:
        config: Configuration instance

    Returns:
        API key, or None when the variable is unset (e.g. for the mock store)
    """
    return os.getenv(config.store.api_key_env_var) or None
