"""API routes."""

from .auth_routes import router as auth_router
from .folders import router as folders_router
from .share import router as share_router
from .pages import router as pages_router

__all__ = [
    "auth_router",
    "folders_router",
    "share_router",
    "pages_router",
]
