"""Entry point for running patient_dashboard as a module.

This allows the package to be executed as:
    python -m patient_dashboard
"""

from patient_dashboard.cli.main import cli

if __name__ == "__main__":
    cli()
