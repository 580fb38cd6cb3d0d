"""Permission checks."""
