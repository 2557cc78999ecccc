"""Custom User model using bcrypt-hashed passwords and soft deletion.

Note: We intentionally avoid Django's built-in groups/permissions (no
PermissionsMixin); roles and permissions live in the access_control app and
are linked to users through UserRole rows.
"""

import uuid
from typing import Optional, ClassVar

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from core.managers import ActiveManager
from .managers import UserManager


class User(AbstractBaseUser):
    """User identified by email; ``deleted_at`` marks logical deletion.

    The email stays reserved after deletion: the unique index covers
    soft-deleted rows too.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    password_hash = models.CharField(max_length=128)
    token_version = models.PositiveIntegerField(default=1)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = []

    objects = UserManager()
    active = ActiveManager()

    class Meta:
        """Active listings are ordered by email."""
        ordering = ["email"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.email

    @property
    def is_active(self) -> bool:  # type: ignore[override]
        return self.deleted_at is None

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


__all__ = ["User"]
