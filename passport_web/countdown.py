"""Resend countdowns kept as deadlines in a mutable mapping (usually the Flask session)."""

import math
import time


class CountdownRegistry:
    """One countdown per identifier.

    Deadlines are epoch seconds stored under ``storage[key]``. The dict is
    written back whole on every change so the Flask session notices it.
    """

    def __init__(self, storage, key="otp_countdowns", clock=None):
        self._storage = storage
        self._key = key
        self._clock = clock or time.time

    def _deadlines(self):
        return dict(self._storage.get(self._key) or {})

    def _save(self, deadlines):
        self._storage[self._key] = deadlines

    def start(self, identifier, seconds):
        deadlines = self._deadlines()
        deadlines[identifier] = self._clock() + seconds
        self._save(deadlines)

    def remaining(self, identifier) -> int:
        deadlines = self._deadlines()
        deadline = deadlines.get(identifier)
        if deadline is None:
            return 0
        left = deadline - self._clock()
        if left <= 0:
            del deadlines[identifier]
            self._save(deadlines)
            return 0
        return math.ceil(left)

    def is_active(self, identifier) -> bool:
        return self.remaining(identifier) > 0

    def cancel(self, identifier):
        deadlines = self._deadlines()
        if deadlines.pop(identifier, None) is not None:
            self._save(deadlines)
