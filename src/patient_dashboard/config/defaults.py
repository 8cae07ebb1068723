"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "store": {
        # Local mock store started with `patient-dash mock start`
        "base_url": "http://localhost:8080",
        "table": "patients",
        "api_key_env_var": "PATIENT_DASH_STORE_API_KEY",
    },
    "transport": {
        "verify_tls": True,
        "timeout_connect": 10,
        "timeout_read": 30,
        # Store calls are not retried; a failed submit is resubmitted by the user
        "max_retries": 0,
        "backoff_factor": 0.3,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/patient-dash.log",
        "redact_pii": False,
    },
    "view": {
        "default_sort_field": "created_at",
        "default_sort_descending": True,
    },
}

DEFAULT_CONFIG_PATH = "config/config.json"
