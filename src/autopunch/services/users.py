"""
User service: sync (upsert), fetch and delete users.
"""
import logging
from typing import Any, Mapping, Tuple

from autopunch.exceptions import UserNotFound, ValidationFailed
from autopunch.models import User
from autopunch.validation import validate_user

logger = logging.getLogger(__name__)


class UserService:
    """User management on top of the JSON user store."""

    def __init__(self, user_store, cipher):
        self.user_store = user_store
        self.cipher = cipher

    def sync_user(self, payload: Mapping[str, Any]) -> Tuple[User, bool]:
        """
        Create the user if new, otherwise update it.

        Args:
            payload: camelCase fields: id, password, loginTime, logoutTime, weekdays

        Returns:
            Tuple of (stored user, is_new)

        Raises:
            ValidationFailed: If the payload is invalid
        """
        user_id = payload.get("id")
        password = payload.get("password") or ""
        login_time = payload.get("loginTime")
        logout_time = payload.get("logoutTime")
        weekdays = payload.get("weekdays")
        if weekdays is None:
            weekdays = []

        with self.user_store.transaction():
            users = self.user_store.read_all()
            index = next((i for i, user in enumerate(users) if user.id == user_id), None)
            is_new = index is None

            errors = validate_user(
                user_id, password, login_time, logout_time, weekdays, require_password=is_new
            )
            if errors:
                raise ValidationFailed(errors)

            if is_new:
                user = User(
                    id=user_id,
                    password=self.cipher.encrypt(password),
                    login_time=login_time,
                    logout_time=logout_time,
                    weekdays=tuple(weekdays),
                )
                users.append(user)
            else:
                existing = users[index]
                # today_status is kept as is; schedule edits apply from the next daily reset
                user = User(
                    id=existing.id,
                    password=self.cipher.encrypt(password) if password else existing.password,
                    login_time=login_time,
                    logout_time=logout_time,
                    weekdays=tuple(weekdays),
                    today_status=existing.today_status,
                )
                users[index] = user

            self.user_store.write_all(users)

        logger.info(f"User {user_id} {'created' if is_new else 'updated'}")
        return user, is_new

    def get_user(self, user_id: str) -> User:
        """
        Raises:
            UserNotFound: If no user has this id
        """
        return self.user_store.get(user_id)

    def delete_user(self, user_id: str) -> None:
        """
        Raises:
            UserNotFound: If no user has this id
        """
        with self.user_store.transaction():
            users = self.user_store.read_all()
            remaining = [user for user in users if user.id != user_id]
            if len(remaining) == len(users):
                raise UserNotFound(user_id)
            self.user_store.write_all(remaining)

        logger.info(f"User {user_id} deleted")
