"""Compliance document sources."""

from .loader import DocumentLoader

__all__ = ["DocumentLoader"]
