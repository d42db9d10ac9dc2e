"""Short retry loop for catalog calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from dog_matcher.domain.errors import ApiError, AuthExpiredError

ResultT = TypeVar("ResultT")

_SERVER_ERROR = 500

_logger = logging.getLogger(__name__)


def is_retryable(exc: ApiError) -> bool:
    """Return True for failures that may succeed on a second attempt."""
    if isinstance(exc, AuthExpiredError):
        return False
    return exc.status_code == 0 or exc.status_code >= _SERVER_ERROR


async def call_with_retry(
    func: Callable[[], Awaitable[ResultT]],
    *,
    action: str,
    attempts: int = 1,
    delay_seconds: float = 0.3,
    debug: bool = False,
) -> ResultT:
    """Call ``func`` and retry transient catalog failures up to ``attempts`` times."""
    attempt = 0
    while True:
        try:
            return await func()
        except ApiError as exc:
            attempt += 1
            if debug:
                _logger.warning(
                    "Catalog %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    attempts + 1,
                    exc.status_code,
                    exc.message,
                )
            if attempt > attempts or not is_retryable(exc):
                raise
            await asyncio.sleep(delay_seconds)
