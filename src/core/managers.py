"""Manager shared by the soft-deletable models."""

from django.db import models


class ActiveManager(models.Manager):
    """Manager exposing only rows whose ``deleted_at`` is NULL."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


__all__ = ["ActiveManager"]
