# backend/utils/retry.py
import logging
import time
from typing import Any, Callable, Optional

from backend.config import STORE_RETRY_ATTEMPTS, STORE_RETRY_BASE_DELAY
from backend.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def retry_on_unavailable(
    func: Callable[..., Any],
    *args,
    attempts: Optional[int] = None,
    initial_delay: Optional[float] = None,
    backoff_multiplier: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs,
):
    """
    Call `func`, retrying only on StoreUnavailable with exponential backoff.

    Every other error (NotFound, HandleTaken, ...) is an answer, not a fault,
    and is raised immediately. After the last attempt the StoreUnavailable
    is re-raised unchanged.
    """
    attempts = attempts or STORE_RETRY_ATTEMPTS
    delay = STORE_RETRY_BASE_DELAY if initial_delay is None else initial_delay

    for attempt in range(1, attempts + 1):
        try:
            return func(*args, **kwargs)
        except StoreUnavailable as e:
            if attempt == attempts:
                logger.error("store still unavailable after %d attempts (%s)", attempts, func.__name__)
                raise
            logger.warning(
                "store unavailable, retrying %s in %.2fs (attempt %d/%d): %s",
                func.__name__, delay, attempt, attempts, e.original_error or e,
            )
            sleep(delay)
            delay *= backoff_multiplier
