"""Shared utilities: exception hierarchy and error helpers."""
