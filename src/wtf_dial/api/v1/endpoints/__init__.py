"""API endpoint modules for version 1."""

from .dials import router as dials_router
from .memberships import router as memberships_router
from .system import router as system_router

__all__ = [
    "dials_router",
    "memberships_router",
    "system_router",
]
