"""Stored file API: multipart upload, metadata, rename, delete, download."""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..exceptions import ValidationError
from ..schemas.file import FileResponse, FileUpdate, clean_file_name
from ..schemas.user import MessageResponse
from ..services.file_service import FileService
from ..services.mirror_service import MirrorService, get_mirror_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("", response_model=FileResponse, status_code=201)
def upload_file(
    file: UploadFile = File(...),
    name: str = Form(...),
    folder_id: str = Form(...),
    mirror: MirrorService = Depends(get_mirror_service),
    auth: AuthContext = Depends(require_auth),
):
    """Upload a PDF into one of the caller's folders."""
    try:
        display_name = clean_file_name(name)
    except ValueError as e:
        raise ValidationError(str(e), field="name") from e
    # One byte past the limit is enough to reject an oversized upload.
    data = file.file.read(mirror.max_upload_bytes + 1)
    return mirror.upload_file(auth.user_id, folder_id, display_name, data)


# Declared before /{file_id} so "download" is never taken for an id.
@router.get("/download/{file_id}")
def download_file(
    file_id: str,
    mirror: MirrorService = Depends(get_mirror_service),
    auth: AuthContext = Depends(require_auth),
):
    record, data = mirror.download_file(auth.user_id, file_id)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.name)}"},
    )


@router.get("/{file_id}", response_model=FileResponse)
def get_file(
    file_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return FileService(db).get_file(auth.user_id, file_id)


@router.put("/{file_id}", response_model=FileResponse)
def rename_file(
    file_id: str,
    data: FileUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return FileService(db).rename_file(auth.user_id, file_id, data.name)


@router.delete("/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: str,
    mirror: MirrorService = Depends(get_mirror_service),
    auth: AuthContext = Depends(require_auth),
):
    mirror.delete_file(auth.user_id, file_id)
    return MessageResponse(message="File deleted")
