"""API v1."""

from account_purge.api.v1.router import api_router

__all__ = ["api_router"]
