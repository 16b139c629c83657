"""Version 1 API endpoints."""

from .endpoints import dials_router, memberships_router, system_router

__all__ = [
    "dials_router",
    "memberships_router",
    "system_router",
]
