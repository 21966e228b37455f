"""Contract between the acquisition core and a sensor hub.

A hub owns the hardware (or a simulation of it). Callers register a
listener per sensor type at a requested sampling period and receive
:class:`SensorEvent` values on whatever thread the hub delivers from.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterator, Protocol

ACCELEROMETER = "accelerometer"
GYROSCOPE = "gyroscope"


@dataclass(frozen=True, slots=True)
class SensorEvent:
    sensor_type: str
    timestamp_ns: int
    values: tuple[float, ...]


class SensorEventListener(Protocol):
    def on_sensor_event(self, event: SensorEvent) -> None:  # pragma: no cover - protocol
        ...


class SensorHub(Protocol):
    """Hardware sensor subsystem as seen by :class:`SensorStreamMerger`."""

    def has_sensor(self, sensor_type: str) -> bool:  # pragma: no cover - protocol
        ...

    def register_listener(
        self,
        listener: SensorEventListener,
        sensor_type: str,
        sample_period_us: int,
    ) -> bool:  # pragma: no cover - protocol
        """Start delivering ``sensor_type`` events; ``False`` if that failed."""
        ...

    def unregister_listener(self, listener: SensorEventListener) -> None:  # pragma: no cover - protocol
        """Stop delivering every sensor type to ``listener``."""
        ...


def monotonic_controller(period_us: int) -> Iterator[int]:
    """Yield target monotonic_ns timestamps for a fixed sampling period.

    Each step adds a fixed period to the *previous target* time, which keeps the
    long-term rate stable and avoids drift from small sleep() errors.
    """
    period = max(1, int(period_us)) * 1000
    next_t = time.monotonic_ns()
    while True:
        next_t += period
        yield next_t
