"""HTTP API."""

from storeglot.api.app import app

__all__ = ["app"]
