"""System checks for RBAC configuration."""

from django.core.checks import Error, register
from rest_framework.viewsets import ViewSetMixin

from access_control.permissions import RequiredActionPermission

STANDARD_ACTIONS = ("list", "retrieve", "create", "update", "partial_update", "destroy")


def routed_actions(view_cls) -> list[str]:
    """Names under which ``RequiredActionPermission`` will look the view up."""
    if issubclass(view_cls, ViewSetMixin):
        names = [name for name in STANDARD_ACTIONS if hasattr(view_cls, name)]
        for extra in view_cls.get_extra_actions():
            names.extend(extra.mapping.values())
        return names
    return [method for method in view_cls.http_method_names if method != "options" and hasattr(view_cls, method)]


@register()
def rbac_views_declare_required_actions(app_configs, **kwargs):
    """Ensure every gated view maps each of its actions to an action string.

    A missing entry would make the permission class deny the request, which
    surfaces as an unexplained 403; failing at startup is clearer.
    """
    errors: list[Error] = []

    # Import here to avoid circular imports at module load time.
    from access_control.views import AccessCheckView, PermissionViewSet, RoleViewSet, UserViewSet

    rbac_views = [UserViewSet, RoleViewSet, PermissionViewSet, AccessCheckView]

    for view_cls in rbac_views:
        if RequiredActionPermission not in getattr(view_cls, "permission_classes", []):
            continue
        required = getattr(view_cls, "required_actions", None) or {}
        missing = [name for name in routed_actions(view_cls) if not required.get(name)]
        if missing:
            errors.append(
                Error(
                    f"{view_cls.__name__} uses RequiredActionPermission but has no "
                    f"required action for: {', '.join(missing)}.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )

    return errors
