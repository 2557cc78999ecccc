"""Entity store, assignment manager, and access decision engine.

Every public operation runs in its own transaction through
``core.db.atomic_with_retry``; invariants (unique names, one join row per
pair) are enforced by database constraints rather than by read-then-write
checks, so concurrent callers cannot both succeed.
"""

import logging
import uuid
from typing import Any

from django.contrib.auth import get_user_model
from django.contrib.auth.base_user import BaseUserManager
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from core.db import atomic_with_retry
from .exceptions import Conflict, InvalidInput, NotFound
from .models import Permission, Role, RolePermission, UserRole

logger = logging.getLogger(__name__)

USER = "user"
ROLE = "role"
PERMISSION = "permission"
KINDS = (USER, ROLE, PERMISSION)


def parse_id(value: Any) -> uuid.UUID:
    """Coerce an identifier to UUID, rejecting anything malformed."""

    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"Malformed identifier: {value!r}")
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise InvalidInput(f"Malformed identifier: {value!r}") from exc


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} must be a non-empty string.")
    return value


def _insert(model: type[models.Model], conflict_message: str, **fields) -> models.Model:
    """Insert a row inside a savepoint, mapping constraint violations to Conflict."""
    try:
        with transaction.atomic():
            return model.objects.create(**fields)
    except IntegrityError as exc:
        raise Conflict(conflict_message) from exc


class EntityStore:
    """Create, soft-delete, and read users, roles, and permissions."""

    @staticmethod
    def model_for(kind: str) -> type[models.Model]:
        """Resolve an entity kind (``user``, ``role``, ``permission``) to its model."""
        if kind == USER:
            return get_user_model()
        if kind == ROLE:
            return Role
        if kind == PERMISSION:
            return Permission
        raise InvalidInput(f"Unknown entity kind: {kind!r}")

    @classmethod
    @atomic_with_retry
    def create_user(cls, email: str, password_hash: str):
        """Create a user; the email must be unused, including by deleted users."""
        email = BaseUserManager.normalize_email(_require_text(email, "email"))
        _require_text(password_hash, "password_hash")
        user = _insert(
            get_user_model(),
            "A user with this email already exists.",
            email=email,
            password_hash=password_hash,
        )
        logger.info("Created user %s", user.pk)
        return user

    @classmethod
    @atomic_with_retry
    def create_role(cls, name: str) -> Role:
        """Create a role; names of soft-deleted roles stay reserved."""
        role = _insert(Role, "A role with this name already exists.", name=_require_text(name, "name"))
        logger.info("Created role %s (%s)", role.name, role.pk)
        return role

    @classmethod
    @atomic_with_retry
    def create_permission(cls, action: str) -> Permission:
        """Create a permission; actions of soft-deleted permissions stay reserved."""
        permission = _insert(
            Permission,
            "A permission with this action already exists.",
            action=_require_text(action, "action"),
        )
        logger.info("Created permission %s (%s)", permission.action, permission.pk)
        return permission

    @classmethod
    @atomic_with_retry
    def soft_delete(cls, kind: str, entity_id: Any) -> None:
        """Stamp ``deleted_at`` on an active row; join rows are left in place."""
        model = cls.model_for(kind)
        pk = parse_id(entity_id)
        updated = model.active.filter(pk=pk).update(deleted_at=timezone.now())
        if not updated:
            raise NotFound(f"{kind.capitalize()} {pk} not found.") from None
        logger.info("Soft-deleted %s %s", kind, pk)

    @classmethod
    @atomic_with_retry
    def list_active(cls, kind: str) -> list:
        return list(cls.model_for(kind).active.all())

    @classmethod
    @atomic_with_retry
    def get_active(cls, kind: str, entity_id: Any):
        return cls._get_active(kind, entity_id)

    @classmethod
    def _get_active(cls, kind: str, entity_id: Any, for_update: bool = False):
        """Fetch an active row; callers must already be inside a transaction."""
        model = cls.model_for(kind)
        pk = parse_id(entity_id)
        queryset = model.active.all()
        if for_update:
            queryset = queryset.select_for_update(no_key=True)
        try:
            return queryset.get(pk=pk)
        except model.DoesNotExist:
            raise NotFound(f"{kind.capitalize()} {pk} not found.")


class AssignmentManager:
    """Maintain the UserRole and RolePermission join rows.

    Both endpoints of an assignment are locked for the transaction, in the
    fixed order user, role, permission, so a concurrent soft delete cannot
    slip in between the existence check and the insert.
    """

    @classmethod
    @atomic_with_retry
    def assign_role(cls, user_id: Any, role_id: Any) -> UserRole:
        user = EntityStore._get_active(USER, user_id, for_update=True)
        role = EntityStore._get_active(ROLE, role_id, for_update=True)
        link = _insert(UserRole, "Role is already assigned to this user.", user=user, role=role)
        logger.info("Assigned role %s to user %s", role.pk, user.pk)
        return link

    @classmethod
    @atomic_with_retry
    def remove_role(cls, user_id: Any, role_id: Any) -> None:
        user = EntityStore._get_active(USER, user_id, for_update=True)
        role = EntityStore._get_active(ROLE, role_id, for_update=True)
        deleted, _ = UserRole.objects.filter(user=user, role=role).delete()
        if not deleted:
            raise NotFound("Role is not assigned to this user.")
        logger.info("Removed role %s from user %s", role.pk, user.pk)

    @classmethod
    @atomic_with_retry
    def assign_permission(cls, role_id: Any, permission_id: Any) -> RolePermission:
        role = EntityStore._get_active(ROLE, role_id, for_update=True)
        permission = EntityStore._get_active(PERMISSION, permission_id, for_update=True)
        link = _insert(
            RolePermission,
            "Permission is already granted to this role.",
            role=role,
            permission=permission,
        )
        logger.info("Granted permission %s to role %s", permission.action, role.pk)
        return link

    @classmethod
    @atomic_with_retry
    def remove_permission(cls, role_id: Any, permission_id: Any) -> None:
        role = EntityStore._get_active(ROLE, role_id, for_update=True)
        permission = EntityStore._get_active(PERMISSION, permission_id, for_update=True)
        deleted, _ = RolePermission.objects.filter(role=role, permission=permission).delete()
        if not deleted:
            raise NotFound("Permission is not granted to this role.")
        logger.info("Revoked permission %s from role %s", permission.action, role.pk)

    @classmethod
    @atomic_with_retry
    def roles_of(cls, user_id: Any) -> list[Role]:
        """Active roles held by an active user."""
        user = EntityStore._get_active(USER, user_id)
        return list(Role.active.filter(user_roles__user=user))

    @classmethod
    @atomic_with_retry
    def permissions_of(cls, role_id: Any) -> list[Permission]:
        """Active permissions granted by an active role."""
        role = EntityStore._get_active(ROLE, role_id)
        return list(Permission.active.filter(role_permissions__role=role))


class AccessDecisionEngine:
    """Answer "may this user perform this action?".

    The traversal User -> UserRole -> Role -> RolePermission -> Permission is
    two set computations: the ids of the user's active roles, then the action
    strings of the active permissions those roles grant. Join rows pointing at
    soft-deleted roles or permissions are skipped. Both queries run in one
    transaction so they read the same snapshot.
    """

    @classmethod
    @atomic_with_retry
    def check(cls, user_id: Any, action: str) -> bool:
        """Return True iff an active role of the user grants ``action`` exactly.

        Raises NotFound when the user is absent or soft-deleted; a user with
        no matching permission is a plain ``False``.
        """
        _require_text(action, "action")
        user = EntityStore._get_active(USER, user_id)
        return action in cls._actions_for(user)

    @classmethod
    @atomic_with_retry
    def effective_actions(cls, user_id: Any) -> frozenset[str]:
        user = EntityStore._get_active(USER, user_id)
        return cls._actions_for(user)

    @staticmethod
    def _actions_for(user) -> frozenset[str]:
        role_ids = set(
            UserRole.objects.filter(user=user, role__deleted_at__isnull=True).values_list("role_id", flat=True)
        )
        if not role_ids:
            return frozenset()
        return frozenset(
            RolePermission.objects.filter(
                role_id__in=role_ids, permission__deleted_at__isnull=True
            ).values_list("permission__action", flat=True)
        )


__all__ = [
    "EntityStore",
    "AssignmentManager",
    "AccessDecisionEngine",
    "parse_id",
    "KINDS",
]
