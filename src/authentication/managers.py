"""Custom user manager handling bcrypt hashing and verification."""

import bcrypt
from django.contrib.auth.base_user import BaseUserManager


class UserManager(BaseUserManager):
    """Manager over all user rows, soft-deleted ones included.

    Creation goes through ``access_control.services.EntityStore.create_user``
    so the email uniqueness contract is enforced in one place.
    """

    use_in_migrations = True

    def create_user(self, email: str, password: str | None = None):
        """Create a user with a bcrypt-hashed password."""
        from access_control.services import EntityStore

        if password is None:
            raise ValueError("Password must be provided")
        return EntityStore.create_user(email, self.hash_password(password))

    def get_by_natural_key(self, username):
        return self.get(**{self.model.USERNAME_FIELD: username, "deleted_at__isnull": True})

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """Hash a raw password using bcrypt and return the utf-8 string."""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(raw_password.encode(), salt)
        return hashed.decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Verify raw password against stored bcrypt hash."""

        if not user.password_hash:
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode("utf-8"))


__all__ = ["UserManager"]
