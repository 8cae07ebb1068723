"""Command-line interface for Patient Dashboard."""
