"""Provider fallback orchestration."""

import logging
from typing import Awaitable, Callable, TypeVar

from showfeed.providers.base import ContentProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_provider_fallback(
    primary: ContentProvider,
    fallback: ContentProvider,
    call: Callable[[ContentProvider], Awaitable[T]],
) -> T:
    """Run ``call`` against the primary provider, falling back on failure.

    An unavailable primary is skipped without any request. If the primary
    raises, the same call is issued once against the fallback provider.
    Errors from the fallback are not caught and reach the caller as-is.

    Returns:
        The result of whichever provider answered.
    """
    if not primary.is_available():
        logger.debug(f"{primary.name} unavailable, using {fallback.name}")
        return await call(fallback)

    try:
        return await call(primary)
    except Exception as e:
        logger.warning(
            f"{primary.name} failed, falling back to {fallback.name}: {e}", exc_info=e
        )

    return await call(fallback)
