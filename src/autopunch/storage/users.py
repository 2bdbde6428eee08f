"""
JSON file storage for users.

The whole collection is read and written at once. Writes go to a temporary
file in the same directory which is then renamed over the target, so a
crash mid-write leaves either the old or the new file, never a partial one.
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, List, Union

from autopunch.exceptions import StoreReadFailure, StoreWriteFailure, UserNotFound
from autopunch.models import User

logger = logging.getLogger(__name__)


class JsonUserStore:
    """User collection persisted as a JSON array."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        # Serializes read-modify-write sequences within this process
        self._mutex = threading.RLock()

    def ensure_file_exists(self) -> None:
        """Create the file with an empty array if it doesn't exist."""
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write("[]")
            logger.info(f"Created users file at {self.path}")
        except OSError as e:
            raise StoreWriteFailure(f"Failed to create users file {self.path}: {e}") from e

    def read_all(self) -> List[User]:
        """
        Read all users.

        Raises:
            StoreReadFailure: If the file cannot be read or is malformed
        """
        self.ensure_file_exists()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreReadFailure(f"Invalid JSON in users file {self.path}: {e}") from e
        except OSError as e:
            raise StoreReadFailure(f"Failed to read users file {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StoreReadFailure("Invalid users file format: expected array")

        try:
            return [User.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreReadFailure(f"Invalid user record in {self.path}: {e}") from e

    def write_all(self, users: List[User]) -> None:
        """
        Replace the whole collection.

        Raises:
            StoreWriteFailure: If the file cannot be written
        """
        content = json.dumps([user.to_dict() for user in users], indent=2)
        with self._mutex:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._atomic_write(content)
            except OSError as e:
                raise StoreWriteFailure(f"Failed to write users file {self.path}: {e}") from e

    def get(self, user_id: str) -> User:
        """
        Find a user by id.

        Raises:
            UserNotFound: If no user has this id
        """
        for user in self.read_all():
            if user.id == user_id:
                return user
        raise UserNotFound(user_id)

    def update(self, user_id: str, change: Callable[[User], User]) -> User:
        """Apply change to one stored user and persist the collection."""
        with self._mutex:
            users = self.read_all()
            for index, user in enumerate(users):
                if user.id == user_id:
                    users[index] = change(user)
                    self.write_all(users)
                    return users[index]
        raise UserNotFound(user_id)

    def transaction(self):
        """Hold the store mutex across a caller's own read-modify-write."""
        return self._mutex

    def _atomic_write(self, content: str) -> None:
        fd, temp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except BaseException:
            Path(temp_path).unlink(missing_ok=True)
            raise
