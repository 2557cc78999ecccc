"""Seed the administrator role, its permissions, and optionally an admin user.

Every administrative endpoint is itself gated, so the first administrator has
to be created out of band; this command is that path.
"""

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from access_control.actions import ADMIN_ACTIONS, ADMIN_ROLE_NAME
from access_control.models import Permission, Role, RolePermission, UserRole
from access_control.services import AssignmentManager, EntityStore
from authentication.managers import UserManager


def create_seed_permissions() -> dict[str, Permission]:
    """Create the admin action permissions if missing; return action -> Permission.

    Actions whose permission was soft-deleted stay reserved and are skipped.
    """
    permissions = {}
    for action in ADMIN_ACTIONS:
        permission = Permission.objects.filter(action=action).first()
        if permission is None:
            permission = EntityStore.create_permission(action)
        if permission.deleted_at is None:
            permissions[action] = permission
    return permissions


def create_seed_role() -> Role:
    """Return the active admin role, creating it on first run."""
    role = Role.objects.filter(name=ADMIN_ROLE_NAME).first()
    if role is None:
        return EntityStore.create_role(ADMIN_ROLE_NAME)
    if role.deleted_at is not None:
        raise CommandError(f"Role '{ADMIN_ROLE_NAME}' was deleted and its name cannot be reused.")
    return role


def create_seed_grants(role: Role, permissions: dict[str, Permission]) -> int:
    """Grant each permission to the role; return how many grants were added."""
    granted = set(RolePermission.objects.filter(role=role).values_list("permission_id", flat=True))
    added = 0
    for permission in permissions.values():
        if permission.pk not in granted:
            AssignmentManager.assign_permission(role.pk, permission.pk)
            added += 1
    return added


def seed_admin_role() -> Role:
    """Create the admin role holding every admin action. Idempotent."""
    role = create_seed_role()
    create_seed_grants(role, create_seed_permissions())
    return role


def grant_admin(user, role: Role) -> None:
    """Give ``user`` the admin role unless they already hold it."""
    if not UserRole.objects.filter(user=user, role=role).exists():
        AssignmentManager.assign_role(user.pk, role.pk)


class Command(BaseCommand):
    """Management command to seed the administrator role and user."""

    help = (
        "Seed the admin role with every administrative permission and, given "
        "--admin-email/--admin-password (or RBAC_ADMIN_EMAIL/RBAC_ADMIN_PASSWORD), "
        "an administrator user holding it. Use --reset to drop the admin role's "
        "existing grants first."
    )

    def add_arguments(self, parser):
        parser.add_argument("--admin-email", default=os.environ.get("RBAC_ADMIN_EMAIL"))
        parser.add_argument("--admin-password", default=os.environ.get("RBAC_ADMIN_PASSWORD"))
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Remove every grant held by the admin role before re-seeding it.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        """Entrypoint for the management command; all-or-nothing."""
        self.stdout.write("Seeding RBAC data...")
        role = create_seed_role()
        if options.get("reset"):
            self._reset_grants(role)

        permissions = create_seed_permissions()
        skipped = set(ADMIN_ACTIONS) - set(permissions)
        for action in sorted(skipped):
            self.stdout.write(self.style.WARNING(f"Permission '{action}' is deleted; not granted."))
        added = create_seed_grants(role, permissions)
        self.stdout.write(f"Admin role '{role.name}': {added} grant(s) added.")

        email = options.get("admin_email")
        if email:
            self._seed_admin_user(email, options.get("admin_password"), role)

        self.stdout.write(self.style.SUCCESS("RBAC seed completed."))

    def _reset_grants(self, role: Role) -> None:
        removed, _ = RolePermission.objects.filter(role=role).delete()
        self.stdout.write(self.style.WARNING(f"Removed {removed} grant(s) from '{role.name}'."))

    def _seed_admin_user(self, email: str, password: str | None, role: Role) -> None:
        User = get_user_model()
        user = User.objects.filter(email=email).first()
        if user is None:
            if not password:
                raise CommandError("--admin-password is required to create the admin user.")
            user = EntityStore.create_user(email, UserManager.hash_password(password))
            self.stdout.write(f"Created admin user {email}.")
        elif not user.is_active:
            raise CommandError(f"User {email} was deleted and cannot be made admin.")
        grant_admin(user, role)
