"""Database models."""

from .user import User
from .folder import Folder
from .stored_file import StoredFile

__all__ = ["User", "Folder", "StoredFile"]
