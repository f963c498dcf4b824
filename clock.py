import time


class LogicalClock:
    """Strictly increasing nanosecond timestamps, one per call."""

    def __init__(self, source=time.time_ns):
        self._source = source
        self._last = 0

    def tick(self) -> int:
        now = self._source()
        self._last = now if now > self._last else self._last + 1
        return self._last
