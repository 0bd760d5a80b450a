"""Bounded retry until an API listing comes back non-empty."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from dispatchrun.core.clock import Clock
from dispatchrun.core.errors import ResolutionTimeout
from dispatchrun.core.log import logger

T = TypeVar("T")

DEFAULT_BACKOFF_SECONDS = 1.0


async def retry_until_non_empty(
    producer: Callable[[], Awaitable[Sequence[T]]],
    timeout: float,
    clock: Clock | None = None,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
) -> list[T]:
    """Call producer until it returns something non-empty.

    An empty result is not an error: a freshly dispatched run can take
    a few seconds to show up in listings. There is no way to tell
    "not yet" from "never", so the caller bounds the wait.

    Args:
        producer: Async callable returning a sequence
        timeout: Seconds after which to give up
        clock: Time source (real time by default)
        backoff: Seconds to wait after each empty result

    Returns:
        The first non-empty result, as a list

    Raises:
        ResolutionTimeout: nothing non-empty within timeout
        Any exception raised by producer, unchanged
    """
    clock = clock or Clock()
    start = clock.monotonic()
    attempt = 0

    while clock.monotonic() - start < timeout:
        attempt += 1
        result = await producer()
        if result:
            return list(result)

        logger.trace(f"Empty result on attempt {attempt}, retrying")
        await clock.sleep(backoff)

    raise ResolutionTimeout(
        f"Timed out after {timeout:g}s while attempting to fetch data"
    )
