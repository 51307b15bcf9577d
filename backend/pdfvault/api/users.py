"""Current-user account endpoints: ``/api/user/me``."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, clear_auth_cookies, require_auth
from ..database import get_db
from ..schemas.user import MessageResponse, UserResponse, UserUpdate
from ..services import auth_service
from ..services.mirror_service import MirrorService, get_mirror_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["users"])


@router.get("/me", response_model=UserResponse)
def get_me(db: Session = Depends(get_db), auth: AuthContext = Depends(require_auth)):
    return auth_service.get_user(db, auth.user_id)


@router.patch("/me", response_model=UserResponse)
def update_me(
    body: UserUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return auth_service.update_user(db, auth.user_id, email=body.email, username=body.username)


@router.delete("/me", response_model=MessageResponse)
def delete_me(
    response: Response,
    db: Session = Depends(get_db),
    mirror: MirrorService = Depends(get_mirror_service),
    auth: AuthContext = Depends(require_auth),
):
    """Delete the account: remote namespace first, then every local record."""
    removed = mirror.delete_owner_namespace(auth.user_id)
    if not removed:
        logger.info("No remote namespace to remove", extra={"user_id": auth.user_id})
    auth_service.delete_user(db, auth.user_id)
    clear_auth_cookies(response)
    return MessageResponse(message="Account deleted")
