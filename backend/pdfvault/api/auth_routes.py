"""Authentication API endpoints.

Public endpoints:
    POST /api/auth/register  -- create account
    POST /api/auth/login     -- authenticate; sets access/refresh cookies and returns the access token
    POST /api/auth/refresh   -- new access cookie from the refresh cookie
    POST /api/auth/logout    -- clear both cookies
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..core.auth import (
    REFRESH_COOKIE,
    clear_auth_cookies,
    issue_access_token,
    issue_refresh_token,
    set_access_cookie,
    set_auth_cookies,
    user_id_from_refresh_token,
)
from ..database import get_db
from ..exceptions import AuthenticationError, UserNotFoundError
from ..schemas.user import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from ..services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=201,
    summary="Register a new user",
)
def register_user(body: RegisterRequest, db: Session = Depends(get_db)):
    return auth_service.register_user(db, body.email, body.username, body.password)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and receive tokens",
)
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.email, body.password)
    access = issue_access_token(user.user_id)
    set_auth_cookies(response, access, issue_refresh_token(user.user_id))
    logger.info("User logged in", extra={"user_id": user.user_id})
    return LoginResponse(token=access, user=UserResponse.model_validate(user))


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Issue a new access token from the refresh cookie",
)
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    user_id = user_id_from_refresh_token(request.cookies.get(REFRESH_COOKIE))
    try:
        auth_service.get_user(db, user_id)
    except UserNotFoundError as e:
        raise AuthenticationError("User not found") from e
    access = issue_access_token(user_id)
    set_access_cookie(response, access)
    return TokenResponse(token=access)


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_auth_cookies(response)
    return MessageResponse(message="Logged out")
