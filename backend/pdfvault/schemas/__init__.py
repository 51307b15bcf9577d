"""Pydantic schemas for API validation."""

from .folder import (
    FolderCreate,
    FolderUpdate,
    FolderResponse,
    FolderDeleteResponse,
)
from .file import FileUpdate, FileResponse
from .user import (
    RegisterRequest,
    LoginRequest,
    UserUpdate,
    UserResponse,
    LoginResponse,
    TokenResponse,
    MessageResponse,
)

__all__ = [
    "FolderCreate",
    "FolderUpdate",
    "FolderResponse",
    "FolderDeleteResponse",
    "FileUpdate",
    "FileResponse",
    "RegisterRequest",
    "LoginRequest",
    "UserUpdate",
    "UserResponse",
    "LoginResponse",
    "TokenResponse",
    "MessageResponse",
]
