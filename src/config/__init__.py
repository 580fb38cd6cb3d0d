"""Settings and collection registry."""
