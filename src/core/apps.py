"""App configuration for the core project utilities."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Settings, URLs, middleware, envelopes, and the transaction helper."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
