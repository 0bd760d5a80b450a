"""Monotonic time source used by the retry and search loops."""

import asyncio
import time


class Clock:
    """Wall-clock independent time and sleeping.

    Carried on the runtime state so that tests can substitute a clock
    that advances instantly.
    """

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
