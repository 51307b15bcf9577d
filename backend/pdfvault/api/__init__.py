"""API routes."""

from .auth_routes import router as auth_router
from .users import router as users_router
from .folders import router as folders_router
from .files import router as files_router

__all__ = [
    "auth_router",
    "users_router",
    "folders_router",
    "files_router",
]
