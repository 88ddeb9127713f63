# src/__init__.py - v1
"""pagesync: content-addressable static site deployment."""

from pagesync.version import __version__

__all__ = ["__version__"]
