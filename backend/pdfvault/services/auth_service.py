"""Authentication service: account lifecycle and password hashing.

All password operations use bcrypt via passlib. Passwords are never stored
or logged in plaintext. Endpoints are thin wrappers around these functions.
"""

import logging
import uuid
from typing import Optional

from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import AuthenticationError, ValidationError
from ..models.user import User
from ..repositories.folder_repository import FolderRepository
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

USER_ID_LENGTH = 12


def _normalize_email(email: str) -> str:
    email = email.strip().lower()
    if not email or "@" not in email:
        raise ValidationError("Valid email address required", field="email")
    return email


def register_user(db: Session, email: str, username: str, password: str) -> User:
    """Create a new user account.

    Raises ValidationError if the email or username is already taken.
    """
    email = _normalize_email(email)
    username = username.strip()

    users = UserRepository(db)
    if users.get_by_email(email) is not None:
        raise ValidationError("Email already registered", field="email")
    if users.get_by_username(username) is not None:
        raise ValidationError("Username already taken", field="username")

    user = User(
        user_id=uuid.uuid4().hex[:USER_ID_LENGTH],
        email=email,
        username=username,
        password_hash=bcrypt.hash(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Email or username already registered") from e
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.user_id})
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Validate credentials and return the user.

    Raises AuthenticationError on unknown email or wrong password.
    """
    user = UserRepository(db).get_by_email(email.strip().lower())
    if user is None or not bcrypt.verify(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return user


def get_user(db: Session, user_id: str) -> User:
    return UserRepository(db).get(user_id)


def update_user(
    db: Session,
    user_id: str,
    email: Optional[str] = None,
    username: Optional[str] = None,
) -> User:
    """Change email and/or username. At least one must be given."""
    if email is None and username is None:
        raise ValidationError("Nothing to update: provide email or username")

    users = UserRepository(db)
    user = users.get(user_id)

    if email is not None:
        email = _normalize_email(email)
        taken = users.get_by_email(email)
        if taken is not None and taken.user_id != user_id:
            raise ValidationError("Email already registered", field="email")
        user.email = email

    if username is not None:
        username = username.strip()
        taken = users.get_by_username(username)
        if taken is not None and taken.user_id != user_id:
            raise ValidationError("Username already taken", field="username")
        user.username = username

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Email or username already registered") from e
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str) -> None:
    """Remove the account with every folder and file record it owns.

    Remote storage is cleaned up separately by the caller.
    """
    user = UserRepository(db).get(user_id)
    removed = FolderRepository(db).delete_all_for_owner(user_id)
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id, "deleted_folders": removed})
