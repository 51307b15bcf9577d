"""Authentication dependencies and cookie helpers.

Public interface:
    ``require_auth``       -- returns AuthContext or raises 401.
    ``issue_access_token`` / ``issue_refresh_token``
    ``set_auth_cookies`` / ``clear_auth_cookies``

A request is authenticated by an ``Authorization: Bearer`` header or, when
that is absent, by the ``access_token`` cookie set at login.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import ACCESS, REFRESH, create_token, decode_token
from ..database import get_db
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller. Every folder/file query is scoped by ``user_id``."""
    user_id: str


def issue_access_token(user_id: str) -> str:
    return create_token(
        user_id,
        settings.jwt_secret_key,
        token_type=ACCESS,
        expires_seconds=settings.access_token_minutes * 60,
        algorithm=settings.jwt_algorithm,
    )


def issue_refresh_token(user_id: str) -> str:
    return create_token(
        user_id,
        settings.jwt_refresh_secret_key,
        token_type=REFRESH,
        expires_seconds=settings.refresh_token_days * 86400,
        algorithm=settings.jwt_algorithm,
    )


def _cookie_kwargs() -> dict:
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": settings.secure_cookies,
        "path": "/",
    }


def set_access_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        ACCESS_COOKIE, token, max_age=settings.access_token_minutes * 60, **_cookie_kwargs()
    )


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    set_access_cookie(response, access_token)
    response.set_cookie(
        REFRESH_COOKIE, refresh_token, max_age=settings.refresh_token_days * 86400, **_cookie_kwargs()
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE, path="/")
    response.delete_cookie(REFRESH_COOKIE, path="/")


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Require a valid access token and an existing user."""
    token = credentials.credentials if credentials is not None else request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise AuthenticationError("No token provided")

    payload = decode_token(
        token, settings.jwt_secret_key, expected_type=ACCESS, algorithm=settings.jwt_algorithm
    )
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    from ..models.user import User

    exists = db.query(User.user_id).filter(User.user_id == payload.sub).first()
    if exists is None:
        raise AuthenticationError("User not found")

    return AuthContext(user_id=payload.sub)


def user_id_from_refresh_token(token: Optional[str]) -> str:
    """Validate a refresh token and return its subject. Raises 401 otherwise."""
    if not token:
        raise AuthenticationError("No refresh token provided")
    payload = decode_token(
        token, settings.jwt_refresh_secret_key, expected_type=REFRESH, algorithm=settings.jwt_algorithm
    )
    if payload is None:
        raise AuthenticationError("Invalid or expired refresh token")
    return payload.sub
