from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

MAX_RATE = 100
RATE_PERIOD_MINUTES = 10


@dataclass
class RateWindow:
    start: float
    count: int


class RateLimiter:
    """Cap the number of changes the bot makes to one repository per period.

    This sits on top of GitHub's own per-account quota. Counters are per
    repository, so channels sharing a repository share the budget.
    """

    def __init__(
        self,
        max_rate: int = MAX_RATE,
        period_minutes: float = RATE_PERIOD_MINUTES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_rate = max_rate
        self.period_minutes = period_minutes
        self._period = 60.0 * period_minutes
        self._clock = clock
        self._windows: dict[str, RateWindow] = {}

    def try_consume(self, repository: str) -> bool:
        now = self._clock()
        window = self._windows.get(repository)
        if window is None or now - window.start > self._period:
            self._windows[repository] = RateWindow(start=now, count=1)
            return True
        if window.count < self.max_rate:
            window.count += 1
            return True
        logger.warning("Rate limit reached", extra={"repository": repository, "count": window.count})
        return False

    def denial_message(self) -> str:
        return (
            "Sorry, for security reasons, I won't touch a repository more than "
            f"{self.max_rate} times in {self.period_minutes:g} minutes. Please, try again later."
        )
