"""Folder API.

Create and delete go through MirrorService so the remote directory tree
stays in step; listing, lookup and metadata edits are local only.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.folder import (
    FolderCreate,
    FolderDeleteResponse,
    FolderResponse,
    FolderUpdate,
)
from ..services.folder_service import FolderService
from ..services.mirror_service import MirrorService, get_mirror_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/folders", tags=["folders"])

# Query value meaning "root-level folders only".
ROOT_PARENT = "null"


@router.get("", response_model=List[FolderResponse])
def list_folders(
    parent_id: Optional[str] = Query(None, description=f"Parent folder id; '{ROOT_PARENT}' for root level"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """List the caller's folders, optionally only the children of one parent."""
    service = FolderService(db)
    if parent_id is None:
        return service.list_folders(auth.user_id)
    parent = None if parent_id == ROOT_PARENT else parent_id
    return service.list_folders(auth.user_id, parent, by_parent=True)


@router.post("", response_model=FolderResponse, status_code=201)
def create_folder(
    data: FolderCreate,
    mirror: MirrorService = Depends(get_mirror_service),
    auth: AuthContext = Depends(require_auth),
):
    return mirror.create_folder(auth.user_id, data.name, parent_id=data.parent_id, is_public=data.is_public)


# Declared before /{folder_id} so "public" is never taken for an id.
@router.get("/public/{owner_id}", response_model=List[FolderResponse])
def list_public_folders(owner_id: str, db: Session = Depends(get_db)):
    """Public folders of *owner_id*. No authentication required."""
    return FolderService(db).list_public(owner_id)


@router.get("/{folder_id}", response_model=FolderResponse)
def get_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return FolderService(db).get_folder(auth.user_id, folder_id)


@router.put("/{folder_id}", response_model=FolderResponse)
def update_folder(
    folder_id: str,
    data: FolderUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return FolderService(db).update_folder(auth.user_id, folder_id, name=data.name, is_public=data.is_public)


@router.delete("/{folder_id}", response_model=FolderDeleteResponse)
def delete_folder(
    folder_id: str,
    mirror: MirrorService = Depends(get_mirror_service),
    auth: AuthContext = Depends(require_auth),
):
    """Delete a folder with all of its subfolders and files."""
    count = mirror.delete_folder(auth.user_id, folder_id)
    return FolderDeleteResponse(folder_id=folder_id, deleted_folders=count)
