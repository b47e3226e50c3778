"""Cumulative counter to per-interval rate conversion."""


def saturating_delta(previous: int, current: int) -> int:
    """Return current - previous, clamped at zero on counter reset or wrap."""
    return max(current - previous, 0)


class CounterPair:
    """
    Tracks a pair of cumulative counters (read/write, rx/tx) between ticks.

    The first observation only primes the tracker: a counter that has been
    growing since boot would otherwise report its whole history as one
    interval. Rates stay at zero until a previous value > 0 has been seen.
    """

    __slots__ = ("first", "second", "_prev_first", "_prev_second")

    def __init__(self) -> None:
        self.first = 0
        self.second = 0
        self._prev_first = 0
        self._prev_second = 0

    @property
    def primed(self) -> bool:
        """Whether a previous sample exists to compute deltas from."""
        return self._prev_first > 0

    def update(self, first: int, second: int) -> tuple[int, int]:
        """
        Feed the current cumulative values and return the interval rates.

        Args:
            first: Current cumulative value of the first counter.
            second: Current cumulative value of the second counter.

        Returns:
            (first_rate, second_rate) for the interval since the last call.
        """
        if self.primed:
            self.first = saturating_delta(self._prev_first, first)
            self.second = saturating_delta(self._prev_second, second)
        self._prev_first = first
        self._prev_second = second
        return self.first, self.second
