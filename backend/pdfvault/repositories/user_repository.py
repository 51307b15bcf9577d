"""Repository for user accounts."""

from typing import Optional

from .base import BaseRepository
from ..exceptions import UserNotFoundError
from ..models.user import User


class UserRepository(BaseRepository[User]):
    model_class = User
    id_column = "user_id"
    owner_column = "user_id"
    not_found_error = UserNotFoundError

    def get(self, user_id: str) -> User:
        user = self.get_by_id_optional(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()
