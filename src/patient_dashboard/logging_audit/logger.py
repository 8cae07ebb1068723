"""Root logger setup for patient-dash.

Console output follows the requested level; the rotating log file always
receives DEBUG, which includes the store request/response bodies.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .formatters import PIIRedactingFormatter

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "patient-dash.log"
LOG_FILE_ENV_VAR = "PATIENT_DASH_LOG_FILE"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

_logging_configured = False


def _resolve_log_file(log_file: Optional[Path]) -> Path:
    if log_file is not None:
        return log_file
    env_log_file = os.environ.get(LOG_FILE_ENV_VAR)
    return Path(env_log_file) if env_log_file else DEFAULT_LOG_FILE


def _formatter(redact_pii: bool) -> PIIRedactingFormatter:
    return PIIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_pii: bool = False,
) -> None:
    """Install the console and rotating file handlers on the root logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Console log level name; the file handler always logs DEBUG
        log_file: Log file path; falls back to PATIENT_DASH_LOG_FILE, then
            logs/patient-dash.log
        redact_pii: Mask patient names, dates of birth and ZIP codes

    Raises:
        ValueError: If the level name is unknown
        RuntimeError: If the log directory cannot be created
    """
    global _logging_configured

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )

    log_file = _resolve_log_file(log_file)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(
            f"Failed to create log directory: {log_file.parent}. Error: {e}"
        ) from e

    root_logger = logging.getLogger()
    if _logging_configured:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(_formatter(redact_pii))
    root_logger.addHandler(console_handler)

    try:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        root_logger.warning(
            f"Failed to create file handler for {log_file}: {e}. Logging to console only."
        )
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_formatter(redact_pii))
        root_logger.addHandler(file_handler)

    _logging_configured = True


def get_logger(module_name: str) -> logging.Logger:
    """Return the logger for a module, normally called with ``__name__``."""
    return logging.getLogger(module_name)
