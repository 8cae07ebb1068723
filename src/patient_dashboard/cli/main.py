"""Main CLI entry point for Patient Dashboard.

This module provides the main Click command group for the patient-dash CLI.
"""

from pathlib import Path
from typing import Optional

import click

from patient_dashboard import __version__
from patient_dashboard.cli.mock_commands import mock_group
from patient_dashboard.cli.record_commands import records
from patient_dashboard.config import load_config
from patient_dashboard.logging_audit import configure_logging
from patient_dashboard.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="patient-dash")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact PII (patient names, dates of birth, ZIP codes) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """Patient Dashboard - manage patient records from the command line.

    Records are validated before they reach the store, and listed with the
    same sort and filter rules as the dashboard table.

    Common usage:

        # Start a local mock store
        patient-dash mock start

        # Add a patient
        patient-dash records add --first-name Ada --last-name Lovelace ...

        # List patients aged 30 or more, oldest record first
        patient-dash records list --filter-field age --operator ">=" --filter-value 30 --asc

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_pii_setting = redact_pii if redact_pii else config_obj.logging.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )


cli.add_command(records)
cli.add_command(mock_group)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        patient-dash config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    click.echo("\nStore:")
    click.echo(f"  Base URL:    {config_obj.store.base_url}")
    click.echo(f"  Table:       {config_obj.store.table}")
    click.echo(f"  API key var: {config_obj.store.api_key_env_var}")

    click.echo("\nTransport:")
    click.echo(f"  Verify TLS:  {config_obj.transport.verify_tls}")
    click.echo(
        f"  Timeouts:    {config_obj.transport.timeout_connect}s connect, "
        f"{config_obj.transport.timeout_read}s read"
    )
    click.echo(f"  Retries:     {config_obj.transport.max_retries}")

    click.echo("\nLogging:")
    click.echo(f"  Level:       {config_obj.logging.level}")
    click.echo(f"  Log file:    {config_obj.logging.log_file}")
    click.echo(f"  Redact PII:  {config_obj.logging.redact_pii}")

    click.echo("\nView:")
    direction = "descending" if config_obj.view.default_sort_descending else "ascending"
    click.echo(f"  Default sort: {config_obj.view.default_sort_field} ({direction})")


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"patient-dash version {__version__}")


if __name__ == "__main__":
    cli()
