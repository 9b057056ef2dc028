"""Shared wall-clock value refreshed on a fixed cadence."""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from duetasks.config import settings
from duetasks.utils.datetimes import now_local

logger = logging.getLogger(__name__)


class Clock:
    """Single mutable `now` that every computation pass reads exactly once.

    ``tick()`` samples the wall clock; ``set()`` pins a value (tests, replays).
    """

    def __init__(self, source: Callable[[], datetime] = now_local):
        self._source = source
        self._now = source()

    @property
    def now(self) -> datetime:
        return self._now

    def tick(self) -> datetime:
        self._now = self._source()
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    async def run(self, interval_seconds: Optional[int] = None) -> None:
        """Refresh `now` forever; cancel the task to stop."""
        interval = interval_seconds or settings.CLOCK_TICK_SECONDS
        logger.info("Clock ticking every %ss", interval)
        while True:
            await asyncio.sleep(interval)
            self.tick()


clock = Clock()
