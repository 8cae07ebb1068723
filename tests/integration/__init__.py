"""Integration tests package."""
