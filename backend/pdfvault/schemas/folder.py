"""Folder schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from ..models.folder import FOLDER_NAME_MAX_LENGTH


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Folder name cannot be empty")
    if len(v) > FOLDER_NAME_MAX_LENGTH:
        raise ValueError(f"Name must be 1-{FOLDER_NAME_MAX_LENGTH} characters long")
    if '/' in v:
        raise ValueError("Folder name cannot contain '/'")
    return v


class FolderCreate(BaseModel):
    """Create a folder. ``parent_id`` None places it at the root level."""
    name: str
    parent_id: Optional[str] = None
    is_public: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class FolderUpdate(BaseModel):
    """Rename a folder or change its visibility."""
    name: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _clean_name(v)


class FolderFileSummary(BaseModel):
    file_id: str
    name: str
    remote_url: str

    class Config:
        from_attributes = True


class FolderResponse(BaseModel):
    """Folder in API responses."""
    folder_id: str
    user_id: str
    name: str
    parent_id: Optional[str] = None
    is_public: bool
    remote_url: str
    files: List[FolderFileSummary] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FolderDeleteResponse(BaseModel):
    folder_id: str
    deleted_folders: int
    message: str = "Folder deleted"
