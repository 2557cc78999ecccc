"""Serializers for access control resources."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Permission, Role, RolePermission, UserRole

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public user fields; the password hash is never exposed."""

    class Meta:
        model = User
        fields = ["id", "email", "created_at"]
        read_only_fields = fields


class RoleSerializer(serializers.ModelSerializer):
    """Role payload; uniqueness is reported by the store as a 409 conflict."""

    class Meta:
        """Name is the only writable field."""
        model = Role
        fields = ["id", "name", "created_at"]
        read_only_fields = ["id", "created_at"]
        extra_kwargs = {"name": {"validators": []}}


class PermissionSerializer(serializers.ModelSerializer):
    """Permission payload; ``action`` is an opaque string like ``edit:post``."""

    class Meta:
        """Action is the only writable field."""
        model = Permission
        fields = ["id", "action", "created_at"]
        read_only_fields = ["id", "created_at"]
        extra_kwargs = {"action": {"validators": [], "trim_whitespace": False}}


class UserRoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserRole
        fields = ["id", "user", "role", "created_at"]
        read_only_fields = fields


class RolePermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = RolePermission
        fields = ["id", "role", "permission", "created_at"]
        read_only_fields = fields


class RoleAssignmentSerializer(serializers.Serializer):
    role_id = serializers.UUIDField()


class PermissionAssignmentSerializer(serializers.Serializer):
    permission_id = serializers.UUIDField()


class AccessCheckSerializer(serializers.Serializer):
    """Input for an access check: whose access, and for which action."""

    user_id = serializers.UUIDField()
    action = serializers.CharField(max_length=150, trim_whitespace=False)


__all__ = [
    "UserSerializer",
    "RoleSerializer",
    "PermissionSerializer",
    "UserRoleSerializer",
    "RolePermissionSerializer",
    "RoleAssignmentSerializer",
    "PermissionAssignmentSerializer",
    "AccessCheckSerializer",
]
