"""Error taxonomy for the access core.

Each error is a DRF ``APIException`` so it can be raised from services and
rendered by ``core.exceptions.custom_exception_handler`` without translation,
while plain Python callers catch them like any other exception.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class RBACError(APIException):
    """Base class for access core errors."""


class NotFound(RBACError):
    """Referenced id is absent or logically deleted."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "not_found"


class Conflict(RBACError):
    """Uniqueness or duplicate-assignment violation."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class Forbidden(RBACError):
    """Caller lacks the action required for the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action on this resource."
    default_code = "permission_denied"


class InvalidInput(RBACError):
    """Malformed identifier or empty required field."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


__all__ = ["RBACError", "NotFound", "Conflict", "Forbidden", "InvalidInput"]
