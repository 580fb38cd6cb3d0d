"""Logging setup and request context."""
