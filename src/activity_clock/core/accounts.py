"""Login accounts mapping a name and password to a stable user identity."""

import logging

import bcrypt  # type: ignore[import-not-found]

from activity_clock.core.exceptions import AuthenticationError
from activity_clock.core.models import User
from activity_clock.core.storage import StorageManager

logger = logging.getLogger(__name__)


class AccountManager:
    """Resolve login credentials to users, registering unknown names."""

    def __init__(self, storage: StorageManager):
        self.storage = storage

    def login(self, name: str, password: str) -> User:
        """Authenticate a user, creating the account on first login.

        Args:
            name: Login name
            password: Plain-text password

        Returns:
            The existing or newly created user

        Raises:
            AuthenticationError: If the name exists and the password is wrong
            ValueError: If name or password is empty
        """
        name = name.strip()
        if not name or not password:
            raise ValueError("Both name and password are required")

        with self.storage.account_lock(name):
            user = self.storage.get_user_by_name(name)
            if user is None:
                password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
                user = User(name=name, password_hash=password_hash)
                self.storage.save_user(user)
                logger.info(f"Registered user {name} ({user.id})")
                return user

        if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
            logger.warning(f"Failed login for {name}")
            raise AuthenticationError("Invalid name or password")

        logger.info(f"User {name} logged in")
        return user
