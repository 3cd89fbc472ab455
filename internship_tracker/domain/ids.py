"""
Record id generation.

Ids are millisecond timestamps, bumped past the last issued value so two
records created within the same millisecond still get distinct ids.
"""

import time
from typing import Callable, Iterable, Optional


class IdGenerator:
    """Strictly increasing, time-based integer ids"""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last = 0

    def observe(self, ids: Iterable[int]) -> None:
        """Make sure future ids sort after ids that already exist"""
        for existing in ids:
            if existing > self._last:
                self._last = existing

    def next_id(self) -> int:
        now_ms = int(self._clock() * 1000)
        self._last = max(now_ms, self._last + 1)
        return self._last
