"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from account_purge.api.v1.dependencies.
"""

from fastapi import APIRouter

from account_purge.api.v1.endpoints import account, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(account.router, prefix="/account", tags=["account"])
