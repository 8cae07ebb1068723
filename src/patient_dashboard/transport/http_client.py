"""HTTP session factory for talking to the record store.

Sessions carry the transport configuration: TLS verification, connection
pooling and an optional retry policy. Retries, when enabled, only apply to
idempotent reads; inserts are never retried so a failed submission is never
duplicated behind the user's back.
"""

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from patient_dashboard.config.schema import TransportConfig

logger = logging.getLogger(__name__)

DEFAULT_POOL_CONNECTIONS = 4
RETRY_STATUS_CODES = [429, 500, 502, 503, 504]
RETRY_METHODS = ["HEAD", "GET", "OPTIONS"]


def create_session(transport: TransportConfig) -> requests.Session:
    """Create a session configured from the transport settings.

    Args:
        transport: Transport configuration

    Returns:
        Configured requests.Session. Caller is responsible for closing.

    Example:
        >>> session = create_session(TransportConfig())
        >>> try:
        ...     response = session.get(url, timeout=request_timeout(TransportConfig()))
        ... finally:
        ...     session.close()
    """
    retry_strategy = Retry(
        total=transport.max_retries,
        backoff_factor=transport.backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=RETRY_METHODS,
        raise_on_status=False,
    )

    adapter = HTTPAdapter(
        pool_connections=DEFAULT_POOL_CONNECTIONS,
        pool_maxsize=DEFAULT_POOL_CONNECTIONS,
        max_retries=retry_strategy,
    )

    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = transport.verify_tls

    if not transport.verify_tls:
        logger.warning(
            "TLS certificate verification is DISABLED. "
            "This should only be used for development with self-signed certificates."
        )

    logger.debug(
        "Created HTTP session with pool_connections=%d, max_retries=%d, verify_tls=%s",
        DEFAULT_POOL_CONNECTIONS,
        transport.max_retries,
        transport.verify_tls,
    )
    return session


def request_timeout(transport: TransportConfig) -> tuple[int, int]:
    """Return the (connect, read) timeout tuple for requests calls."""
    return (transport.timeout_connect, transport.timeout_read)
