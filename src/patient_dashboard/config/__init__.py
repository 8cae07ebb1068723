"""Config module.

This module provides configuration management functionality.
"""

from patient_dashboard.config.manager import (
    get_store_api_key,
    load_config,
)
from patient_dashboard.config.schema import (
    Config,
    LoggingConfig,
    StoreConfig,
    TransportConfig,
    ViewConfig,
)

__all__ = [
    "load_config",
    "get_store_api_key",
    "Config",
    "StoreConfig",
    "TransportConfig",
    "LoggingConfig",
    "ViewConfig",
]
