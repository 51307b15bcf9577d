"""Stored file schemas."""

from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional

from ..models.stored_file import FILE_NAME_MAX_LENGTH


def clean_file_name(v: str) -> str:
    v = v.strip()
    if not v or len(v) > FILE_NAME_MAX_LENGTH:
        raise ValueError(f"Name must be 1-{FILE_NAME_MAX_LENGTH} characters long")
    return v


class FileUpdate(BaseModel):
    """Rename a file. The remote object keeps its original name."""
    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_file_name(v)


class FileResponse(BaseModel):
    file_id: str
    user_id: str
    folder_id: str
    name: str
    remote_url: str
    size: int
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
