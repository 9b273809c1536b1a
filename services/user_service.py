from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from models.db_storage import DBStorage
from models.user import User
from services.auth_service import AuthService
from services.exceptions import DuplicateIdentity, InvalidInput, NotFound

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("username", "email", "full_name", "date_of_birth", "phone_number", "address")


class UserService:
    """Profile reads and updates for the signed-in user."""

    def __init__(self, storage: DBStorage, hasher, auth: AuthService):
        self._storage = storage
        self._hasher = hasher
        self._auth = auth

    def get_profile(self, user_id: str) -> User:
        user = self._storage.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, user_id: str, data: dict) -> User:
        user = self.get_profile(user_id)
        username = data.get("username")
        email = data.get("email")
        if self._auth.identity_taken(
            username if username != user.username else None,
            email if email != user.email else None,
            exclude_id=user.id,
        ):
            raise DuplicateIdentity()

        for field in PROFILE_FIELDS:
            if field in data:
                setattr(user, field, data[field])
        self._storage.new(user)
        try:
            self._storage.save()
        except IntegrityError:
            raise DuplicateIdentity()
        return user

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        """Replace the password and end every session of the user."""
        user = self.get_profile(user_id)
        if not self._hasher.verify(old_password, user.password_hash):
            raise InvalidInput("Old password is incorrect")
        user.password_hash = self._hasher.hash(new_password)
        self._storage.new(user)
        self._storage.save()
        self._auth.revoke_all_sessions(user.id)
        logger.info("Password changed for user %s", user.id)
