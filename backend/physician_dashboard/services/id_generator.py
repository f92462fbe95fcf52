"""
Integer id generation for patients, examinations and files.

Ids keep the timestamp-millis-plus-three-random-digits shape of earlier
records, so they stay sortable by creation time, but each new id is also forced
above every id seen so far. That makes them strictly increasing, and therefore
unique, for the life of the process even under rapid successive calls.
"""
import random
import time
from typing import Callable, Iterable, Optional


class IdGenerator:

    def __init__(self, clock: Optional[Callable[[], float]] = None, rng: Optional[random.Random] = None):
        self._clock = clock or time.time
        self._rng = rng or random.Random()
        self._last = 0

    @property
    def last_issued(self) -> int:
        return self._last

    def observe(self, ids: Iterable[int]) -> None:
        """Raise the floor to the largest id already in use."""
        for value in ids:
            if value is not None and value > self._last:
                self._last = int(value)

    def reset(self) -> None:
        self._last = 0

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000) * 1000 + self._rng.randint(0, 999)
        self._last = max(self._last + 1, candidate)
        return self._last
