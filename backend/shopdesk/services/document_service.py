# Overview: Record id allocation for the shop collections.

from __future__ import annotations

import time
from typing import Iterable


class RecordIdAllocator:
    """
    Time-based record ids ("1700000000123").

    Ids are millisecond timestamps, bumped past the last issued id and past
    any id already present in the target collection, so two records created
    within the same millisecond never collide.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0

    def next_id(self, taken: Iterable[str] = ()) -> str:
        candidate = max(int(self._clock() * 1000), self._last + 1)
        taken_ids = set(taken)
        while str(candidate) in taken_ids:
            candidate += 1
        self._last = candidate
        return str(candidate)
