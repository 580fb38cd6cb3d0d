"""Identifying filters and dedup classification."""
