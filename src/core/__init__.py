"""Shared models, constants and error taxonomy."""
