from __future__ import annotations

from typing import Optional

from ..core.ringbuffer import RingBuffer

DEFAULT_WINDOW_SIZE = 20
NS_PER_S = 1_000_000_000.0


class SampleRateEstimator:
    """
    Estimate the sampling rate from a sliding window of inter-sample deltas.

    Notes
    -----
    - Timestamps are integer nanoseconds from a monotonic clock.
    - The estimate is ``1e9 / mean(delta_ns)`` over the last ``window_size``
      positive deltas: a moving-average low-pass on the sample period.
    - Zero or negative deltas (duplicates, out-of-order delivery) are not
      admitted to the window; the previous estimate is reported instead.
    """

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self._deltas: RingBuffer[int] = RingBuffer(window_size)
        self._delta_sum = 0
        self._previous_ns: Optional[int] = None

    @property
    def window_size(self) -> int:
        return self._deltas.capacity

    @property
    def buffer_size(self) -> int:
        """Number of deltas currently in the window."""
        return len(self._deltas)

    @property
    def current_hz(self) -> float:
        """Rate implied by the current window (0.0 when empty)."""
        if len(self._deltas) == 0:
            return 0.0
        mean_delta_ns = self._delta_sum / len(self._deltas)
        if mean_delta_ns <= 0:
            return 0.0
        return NS_PER_S / mean_delta_ns

    def reset(self) -> None:
        """Forget the window and the previous timestamp."""
        self._deltas.clear()
        self._delta_sum = 0
        self._previous_ns = None

    def on_sample(self, timestamp_ns: int) -> float:
        """
        Feed one sample timestamp and return the updated rate in Hz.

        The first timestamp after construction or :meth:`reset` returns 0.0.
        """
        previous = self._previous_ns
        self._previous_ns = timestamp_ns
        if previous is None:
            return 0.0

        delta_ns = timestamp_ns - previous
        if delta_ns <= 0:
            return self.current_hz

        evicted = self._deltas.append(delta_ns)
        self._delta_sum += delta_ns
        if evicted is not None:
            self._delta_sum -= evicted
        return self.current_hz
