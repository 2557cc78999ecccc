"""App configuration for the access_control Django application.

Registers the check that every gated view declares the action strings its
endpoints require.
"""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Roles, permissions, their assignments, and the authorization gate."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"
    verbose_name = "Access control"

    def ready(self) -> None:
        """Register system checks when the app is loaded."""
        from . import checks  # noqa: F401
