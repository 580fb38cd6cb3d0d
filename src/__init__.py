# src/__init__.py - v1
"""docwrite: deduplicating bulk write path with cache-coherence signaling."""

from docwrite.version import __version__

__all__ = ["__version__"]
