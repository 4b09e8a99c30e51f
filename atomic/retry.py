"""Default retry policy for transacters."""

import time
from typing import Callable, List, Optional, Sequence, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    ResourceClosedError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from atomic.core.config import DEFAULT_BACKOFFS
from atomic.core.errors import (
    AttemptError,
    CommitError,
    ResourceCreationError,
    RetryError,
    contains,
    walk,
)
from atomic.core.logging import get_logger
from atomic.core.observability import log_counter_increment

logger = get_logger(__name__)

T = TypeVar("T")

RetryFunc = Callable[[Sequence[float], Callable[[], T]], T]

# Errors meaning the deadline passed or the connection is already gone.
RETRYABLE_ERRORS = (
    TimeoutError,
    ConnectionError,
    DisconnectionError,
    ResourceClosedError,
    PoolTimeoutError,
)

__all__ = ["DEFAULT_BACKOFFS", "RETRYABLE_ERRORS", "default_retry", "is_retryable"]


def is_retryable(error: Optional[BaseException]) -> bool:
    """Return True if ``error`` is, or wraps, a transient infrastructure error.

    Any other error, business logic failures included, is terminal. So are
    a failed commit and a failed resources factory whatever their cause:
    retrying a commit would replay work that already ran.
    """
    if contains(error, CommitError, ResourceCreationError):
        return False
    for candidate in walk(error):
        if isinstance(candidate, RETRYABLE_ERRORS):
            return True
        if isinstance(candidate, DBAPIError) and candidate.connection_invalidated:
            return True
    return False


def default_retry(backoffs: Sequence[float], run: Callable[[], T]) -> T:
    """Call ``run`` until it succeeds, retrying transient errors.

    ``run`` is retried at most ``len(backoffs)`` times, sleeping
    ``backoffs[i]`` seconds before retry ``i``. The sleep blocks the calling
    thread and does not observe any context cancellation.

    Raises:
        RetryError: the last error was not retryable or retries ran out. It
            holds one ``AttemptError`` per failed call, first to last.
    """
    failures: List[AttemptError] = []
    attempt = 0

    while True:
        try:
            return run()
        except Exception as e:
            failures.append(AttemptError(attempt, e))
            if not is_retryable(e) or attempt >= len(backoffs):
                break

            delay = backoffs[attempt]
            logger.warning(
                f"Transaction attempt {attempt + 1}/{len(backoffs) + 1} failed, "
                f"retrying in {delay:.2f}s: {type(e).__name__}: {e}"
            )
            log_counter_increment("transaction_retry", attempt=attempt)
            time.sleep(delay)
            attempt += 1

    if attempt >= len(backoffs) and is_retryable(failures[-1].error):
        logger.error(f"Transaction failed after {len(failures)} attempts")
    raise RetryError(failures)
