"""Authorization gate: the single guard every protected operation goes through."""

import logging
from typing import Any

from .exceptions import Forbidden, NotFound
from .services import AccessDecisionEngine

logger = logging.getLogger(__name__)


def require(subject_user_id: Any, required_action: str) -> None:
    """Raise Forbidden unless the subject holds ``required_action``.

    A subject that no longer resolves to an active user is denied as well;
    the caller's own identity is never reported as NotFound.
    """

    try:
        allowed = AccessDecisionEngine.check(subject_user_id, required_action)
    except NotFound as exc:
        logger.warning("Denied %s: subject %s is not an active user", required_action, subject_user_id)
        raise Forbidden() from exc

    if not allowed:
        logger.warning("Denied %s to user %s", required_action, subject_user_id)
        raise Forbidden()


__all__ = ["require"]
