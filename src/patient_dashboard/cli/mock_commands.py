"""CLI commands for the mock record store."""

import json
import logging
from pathlib import Path
from typing import Optional

import click
import requests

from patient_dashboard.mock_server.app import run_server
from patient_dashboard.mock_server.config import load_config

logger = logging.getLogger(__name__)


@click.group(name="mock")
def mock_group() -> None:
    """Run a local mock record store.

    The mock store serves the same REST row API as the real one:

    \b
    - GET  /health             Health check
    - GET  /rest/v1/<table>    List rows
    - POST /rest/v1/<table>    Insert a row
    """
    pass


@mock_group.command("start")
@click.option("--host", default=None, help="Host address (default from mock config)")
@click.option("--port", type=int, default=None, help="Port (default from mock config)")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Mock server configuration file (default: mocks/config.json)",
)
def start(host: Optional[str], port: Optional[int], config_file: Optional[Path]) -> None:
    """Start the mock store in the foreground (Ctrl+C to stop).

    Examples:

        patient-dash mock start

        patient-dash mock start --port 9090
    """
    try:
        config = load_config(config_file)
    except (ValueError, FileNotFoundError) as e:
        click.secho(f"Invalid mock server configuration: {e}", fg="red", err=True)
        raise click.exceptions.Exit(1)

    click.echo(
        f"Starting mock record store on http://{host or config.host}:{port or config.port}"
    )
    run_server(host=host, port=port, config=config)


@mock_group.command("status")
@click.option("--url", default="http://localhost:8080", help="Mock store base URL")
def status(url: str) -> None:
    """Query the mock store health endpoint."""
    try:
        response = requests.get(f"{url.rstrip('/')}/health", timeout=5)
        response.raise_for_status()
    except requests.RequestException as e:
        click.secho(f"✗ Mock store not reachable at {url}: {e}", fg="red", err=True)
        raise click.exceptions.Exit(1)

    health = response.json()
    click.secho(f"✓ Mock store is {health.get('status', 'unknown')}", fg="green")
    click.echo(json.dumps(health, indent=2))
