"""App configuration for authentication components."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Identity provider: soft-deletable User model, JWT issuance, and auth endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
