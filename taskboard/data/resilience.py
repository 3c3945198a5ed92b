"""Primary/fallback execution of a single data operation."""

import logging
from collections.abc import Callable
from typing import TypeVar

from taskboard.data.errors import ErrorKind, classify_error, to_data_access_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_fallback(
    operation: str,
    primary: Callable[[], T],
    fallback: Callable[[], T],
    *,
    fallback_enabled: bool = True,
) -> T:
    """Run ``primary``; re-run the operation through ``fallback`` on a capability error.

    At most two attempts are made, one per path, strictly in sequence. Any
    failure other than a capability error on the primary path, and any failure
    at all on the fallback path, is raised as a classified ``DataAccessError``
    or, when it fits no category, as the original exception.
    """
    try:
        return primary()
    except Exception as e:
        kind = classify_error(e)
        if kind is not ErrorKind.CAPABILITY_UNSUPPORTED or not fallback_enabled:
            classified = to_data_access_error(e, operation, kind)
            if classified is None or classified is e:
                raise
            raise classified from e
        logger.warning(f"{operation}: ORM path unsupported by the store ({e}), using direct driver")

    try:
        result = fallback()
    except Exception as e:
        logger.error(f"{operation}: direct driver path failed: {e}")
        classified = to_data_access_error(e, operation)
        if classified is None or classified is e:
            raise
        raise classified from e

    logger.info(f"{operation}: completed through direct driver")
    return result
