"""Routing for access control endpoints."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AccessCheckView, PermissionViewSet, RoleViewSet, UserViewSet

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")
router.register(r"roles", RoleViewSet, basename="role")
router.register(r"permissions", PermissionViewSet, basename="permission")

urlpatterns = [
    path("access/check/", AccessCheckView.as_view(), name="access-check"),
    path("", include(router.urls)),
]
