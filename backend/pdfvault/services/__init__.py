"""Business logic services."""

from .file_service import FileService
from .folder_service import FolderService
from .mirror_service import MirrorService

__all__ = ["FileService", "FolderService", "MirrorService"]
