"""Identifier computation and date normalisation."""
