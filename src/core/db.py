"""Transaction helper shared by the store, assignment, and access-check services."""

import logging
from functools import wraps

from django.conf import settings
from django.db import OperationalError, connection, transaction

from access_control.exceptions import Conflict

logger = logging.getLogger(__name__)

# SQLSTATE codes for serialization failure and deadlock.
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def is_serialization_failure(exc: BaseException) -> bool:
    """Return True if ``exc`` was caused by a retryable isolation conflict.

    Django wraps driver errors and keeps the original as ``__cause__``;
    psycopg 3 exposes ``sqlstate`` while psycopg2 exposes ``pgcode``.
    """

    cause = exc.__cause__ or exc
    code = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    return code in RETRYABLE_SQLSTATES


def atomic_with_retry(func):
    """Run ``func`` in ``transaction.atomic()`` and retry isolation conflicts.

    Retries only happen when this call owns the outermost transaction: inside
    a caller's atomic block the whole transaction is already doomed, so the
    conflict is surfaced immediately. After ``RBAC_TRANSACTION_RETRIES``
    attempts the failure is reported as ``Conflict``.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        attempts = max(1, getattr(settings, "RBAC_TRANSACTION_RETRIES", 3))
        nested = connection.in_atomic_block
        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return func(*args, **kwargs)
            except OperationalError as exc:
                if not is_serialization_failure(exc):
                    raise
                if nested or attempt == attempts:
                    logger.warning(
                        "%s gave up after %d attempt(s) on isolation conflict",
                        func.__qualname__,
                        attempt,
                    )
                    raise Conflict("Concurrent update detected, please retry.") from exc
                logger.warning(
                    "%s hit an isolation conflict, retrying (attempt %d of %d)",
                    func.__qualname__,
                    attempt,
                    attempts,
                )
        raise AssertionError("unreachable")  # pragma: no cover

    return wrapper


__all__ = ["atomic_with_retry", "is_serialization_failure"]
