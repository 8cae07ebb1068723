"""Mock record store server for local use and integration tests."""
