"""HTTP API."""

from .routes_lookup import router as lookup_router, get_loader

__all__ = ["lookup_router", "get_loader"]
