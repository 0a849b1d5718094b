"""Repository for user accounts."""

from typing import Optional

from ..models.user import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Data access layer for users."""

    model_class = User

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_access_key(self, access_key: str) -> Optional[User]:
        return self.db.query(User).filter(User.access_key == access_key).first()

    def access_key_exists(self, access_key: str) -> bool:
        return self.get_by_access_key(access_key) is not None
