"""DRF permission class applying the authorization gate to views."""

from rest_framework import permissions
from rest_framework.viewsets import ViewSetMixin

from .gate import require


class RequiredActionPermission(permissions.BasePermission):
    """Allow the request only if the caller holds the view's required action.

    Views declare ``required_actions``, a mapping from the viewset action name
    (``list``, ``create``, extra ``@action`` names) to an action string. Plain
    APIViews key the mapping by lower-cased HTTP method instead. A request
    whose action has no entry is denied.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            return False

        # Unrouted method on a viewset: let DRF answer 405.
        if isinstance(view, ViewSetMixin) and getattr(view, "action", None) is None:
            return True

        required_action = self.required_action_for(request, view)
        if not required_action:
            return False

        require(user.pk, required_action)
        return True

    @staticmethod
    def required_action_for(request, view) -> str | None:
        """Look up the action string guarding this request on ``view``."""
        key = getattr(view, "action", None) or request.method.lower()
        return getattr(view, "required_actions", {}).get(key)


__all__ = ["RequiredActionPermission"]
