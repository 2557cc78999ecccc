"""Administrative and query endpoints, each gated by a fixed action string."""

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core.response import BaseAPIView, BaseViewSet, api_response
from . import actions
from .models import Permission, Role
from .permissions import RequiredActionPermission
from .serializers import (
    AccessCheckSerializer,
    PermissionAssignmentSerializer,
    PermissionSerializer,
    RoleAssignmentSerializer,
    RolePermissionSerializer,
    RoleSerializer,
    UserRoleSerializer,
    UserSerializer,
)
from .services import PERMISSION, ROLE, USER, AccessDecisionEngine, AssignmentManager, EntityStore

User = get_user_model()


class UserViewSet(BaseViewSet):
    """List, inspect, and soft-delete users; manage the roles they hold."""

    serializer_class = UserSerializer
    permission_classes = [RequiredActionPermission]
    queryset = User.active.all()
    required_actions = {
        "list": actions.READ_USER,
        "retrieve": actions.READ_USER,
        "destroy": actions.DELETE_USER,
        "user_roles": actions.READ_ROLE,
        "assign_role": actions.ASSIGN_ROLE,
        "remove_role": actions.ASSIGN_ROLE,
    }

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        return api_response(UserSerializer(EntityStore.list_active(USER), many=True).data)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        return api_response(UserSerializer(EntityStore.get_active(USER, pk)).data)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        """Soft-delete a user; their role assignments stay but become inert."""
        EntityStore.soft_delete(USER, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="roles", serializer_class=RoleSerializer)
    def user_roles(self, request, pk=None):
        """Active roles currently held by the user."""
        return api_response(RoleSerializer(AssignmentManager.roles_of(pk), many=True).data)

    @user_roles.mapping.post
    def assign_role(self, request, pk=None):
        """Give the user a role; 409 if they already hold it."""
        serializer = RoleAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        link = AssignmentManager.assign_role(pk, serializer.validated_data["role_id"])
        return api_response(UserRoleSerializer(link).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"roles/(?P<role_id>[^/.]+)")
    def remove_role(self, request, pk=None, role_id=None):
        """Take a role away from the user; 404 if they do not hold it."""
        AssignmentManager.remove_role(pk, role_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RoleViewSet(BaseViewSet):
    """Create, list, and soft-delete roles; manage the permissions they grant."""

    serializer_class = RoleSerializer
    permission_classes = [RequiredActionPermission]
    queryset = Role.active.all()
    required_actions = {
        "list": actions.READ_ROLE,
        "retrieve": actions.READ_ROLE,
        "create": actions.CREATE_ROLE,
        "destroy": actions.DELETE_ROLE,
        "role_permissions": actions.READ_PERMISSION,
        "assign_permission": actions.ASSIGN_PERMISSION,
        "remove_permission": actions.ASSIGN_PERMISSION,
    }

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        return api_response(RoleSerializer(EntityStore.list_active(ROLE), many=True).data)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        return api_response(RoleSerializer(EntityStore.get_active(ROLE, pk)).data)

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = EntityStore.create_role(serializer.validated_data["name"])
        return api_response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        EntityStore.soft_delete(ROLE, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="permissions", serializer_class=PermissionSerializer)
    def role_permissions(self, request, pk=None):
        """Active permissions currently granted by the role."""
        return api_response(PermissionSerializer(AssignmentManager.permissions_of(pk), many=True).data)

    @role_permissions.mapping.post
    def assign_permission(self, request, pk=None):
        serializer = PermissionAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        link = AssignmentManager.assign_permission(pk, serializer.validated_data["permission_id"])
        return api_response(RolePermissionSerializer(link).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"permissions/(?P<permission_id>[^/.]+)")
    def remove_permission(self, request, pk=None, permission_id=None):
        AssignmentManager.remove_permission(pk, permission_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PermissionViewSet(BaseViewSet):
    """Create, list, and soft-delete permissions."""

    serializer_class = PermissionSerializer
    permission_classes = [RequiredActionPermission]
    queryset = Permission.active.all()
    required_actions = {
        "list": actions.READ_PERMISSION,
        "retrieve": actions.READ_PERMISSION,
        "create": actions.CREATE_PERMISSION,
        "destroy": actions.DELETE_PERMISSION,
    }

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        return api_response(PermissionSerializer(EntityStore.list_active(PERMISSION), many=True).data)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        return api_response(PermissionSerializer(EntityStore.get_active(PERMISSION, pk)).data)

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = PermissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        permission = EntityStore.create_permission(serializer.validated_data["action"])
        return api_response(PermissionSerializer(permission).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        EntityStore.soft_delete(PERMISSION, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AccessCheckView(BaseAPIView):
    """Evaluate whether an arbitrary user may perform an action."""

    permission_classes = [RequiredActionPermission]
    required_actions = {"post": actions.CHECK_ACCESS}

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        serializer = AccessCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user_id = serializer.validated_data["user_id"]
        requested = serializer.validated_data["action"]
        allowed = AccessDecisionEngine.check(user_id, requested)
        return api_response({"user_id": str(user_id), "action": requested, "allowed": allowed})


__all__ = ["UserViewSet", "RoleViewSet", "PermissionViewSet", "AccessCheckView"]
