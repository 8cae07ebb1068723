"""Flask application serving a mock PostgREST-style record store.

Rows are kept in memory for the lifetime of the process. The store assigns
``id`` (uuid4) and ``created_at`` (ISO-8601 UTC) on insert and never
validates row contents: validation is the client's job.
"""

import logging
import random
import time
import uuid
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Any

from flask import Flask, Response, jsonify, request

from .config import MockServerConfig, load_config


_server_start_time: datetime | None = None
_request_count: int = 0
_config: MockServerConfig = MockServerConfig()
_rows: list[dict[str, Any]] = []
_rows_lock = Lock()

app = Flask(__name__)

logger = logging.getLogger("patient_dashboard.mock_server")


def setup_logging(config: MockServerConfig) -> logging.Logger:
    """Configure logging for mock server with rotation.

    Args:
        config: Mock server configuration

    Returns:
        Configured logger instance
    """
    logger.setLevel(config.log_level)
    logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_path = Path(config.log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def error_response(code: str, message: str, http_status: int) -> tuple[Response, int]:
    """Build a PostgREST-style JSON error body."""
    logger.warning(f"Store error generated: {code} - {message}")
    body = {"code": code, "message": message, "details": None, "hint": None}
    return jsonify(body), http_status


def reset_store() -> None:
    """Drop every stored row."""
    with _rows_lock:
        _rows.clear()


@app.before_request
def log_request():
    """Log all incoming requests."""
    global _request_count
    _request_count += 1
    logger.info(
        f"Request #{_request_count}: {request.method} {request.path} "
        f"(Content-Length: {request.content_length or 0})"
    )


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint with uptime, row and request counts."""
    uptime_seconds = 0
    if _server_start_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _server_start_time).total_seconds())

    with _rows_lock:
        row_count = len(_rows)

    return jsonify(
        {
            "status": "healthy",
            "table": _config.table,
            "endpoints": ["/health", f"/rest/v1/{_config.table}"],
            "row_count": row_count,
            "uptime_seconds": uptime_seconds,
            "request_count": _request_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    ), 200


@app.route("/rest/v1/<table>", methods=["GET", "POST"])
def table_rows(table: str):
    """Select or insert rows of the served table."""
    if table != _config.table:
        return error_response("42P01", f'relation "public.{table}" does not exist', 404)

    if _config.api_key is not None and request.headers.get("apikey") != _config.api_key:
        return error_response("PGRST301", "Invalid API key", 401)

    if _config.response_delay_ms > 0:
        logger.debug(f"Simulating network delay: {_config.response_delay_ms}ms")
        time.sleep(_config.response_delay_ms / 1000.0)

    if _config.failure_rate > 0 and random.random() < _config.failure_rate:
        return error_response("PGRST000", "Simulated store outage", 503)

    if request.method == "GET":
        with _rows_lock:
            rows = [dict(row) for row in _rows]
        logger.debug(f"Returning {len(rows)} row(s)")
        return jsonify(rows), 200

    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list) or not payload or not all(
        isinstance(item, dict) for item in payload
    ):
        return error_response("PGRST102", "Request body must be a JSON object or array of objects", 400)

    inserted = []
    with _rows_lock:
        for item in payload:
            row = dict(item)
            row["id"] = str(uuid.uuid4())
            row["created_at"] = datetime.now(timezone.utc).isoformat()
            _rows.append(row)
            inserted.append(dict(row))
    logger.info(f"Inserted {len(inserted)} row(s)")

    if "return=representation" in request.headers.get("Prefer", ""):
        return jsonify(inserted), 201
    return Response(status=201)


def initialize_app(config: MockServerConfig) -> None:
    """Initialize Flask app with configuration.

    Args:
        config: Mock server configuration
    """
    global _config, _server_start_time
    _config = config
    _server_start_time = datetime.now(timezone.utc)
    setup_logging(config)
    logger.info(f"Mock store initialized serving table '{config.table}'")


def run_server(
    host: str | None = None,
    port: int | None = None,
    config: MockServerConfig | None = None,
    debug: bool = False,
) -> None:
    """Run the Flask mock store.

    Args:
        host: Host address (defaults to config value)
        port: Port number (defaults to config value)
        config: Mock server configuration (loads from file if not provided)
        debug: Enable debug mode (default: False)
    """
    if config is None:
        config = load_config()

    initialize_app(config)

    host = host or config.host
    port = port or config.port

    logger.info(f"Starting mock record store on http://{host}:{port}")
    logger.info(f"Health check available at: http://{host}:{port}/health")

    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    run_server()
