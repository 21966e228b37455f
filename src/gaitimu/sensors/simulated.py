"""Synthetic accelerometer/gyroscope source for demos and tests."""

from __future__ import annotations

import math
import time
from typing import Iterable, Optional

import numpy as np

from .base import ACCELEROMETER, GYROSCOPE
from .polling import PollingSensorHub

STANDARD_GRAVITY = 9.80665


class SimulatedSensorHub(PollingSensorHub):
    """
    Sensor hub producing a walking-like signal.

    Acceleration oscillates at twice the stride frequency on top of gravity
    and angular velocity at the stride frequency, both with Gaussian noise.

    Parameters
    ----------
    stride_hz:
        Stride frequency of the synthetic gait.
    noise_std:
        Standard deviation of the additive noise (same units as the axis).
    missing:
        Sensor types reported as absent, to exercise the unavailable path.
    refuse:
        Sensor types that are present but whose registration fails.
    seed:
        Seed for the noise generator.
    """

    thread_prefix = "GaitImuSimulated"

    def __init__(
        self,
        *,
        stride_hz: float = 0.9,
        noise_std: float = 0.05,
        missing: Iterable[str] = (),
        refuse: Iterable[str] = (),
        seed: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.stride_hz = float(stride_hz)
        self.noise_std = float(noise_std)
        self._missing = set(missing)
        self._refuse = set(refuse)
        self._rng = np.random.default_rng(seed)
        self._t0_ns = time.monotonic_ns()

    def has_sensor(self, sensor_type: str) -> bool:
        return sensor_type in (ACCELEROMETER, GYROSCOPE) and sensor_type not in self._missing

    def _prepare(self, sensor_type: str, sample_period_us: int) -> None:
        if sensor_type in self._refuse:
            raise OSError(f"simulated registration failure for {sensor_type}")

    def _read(self, sensor_type: str) -> tuple[float, float, float]:
        with self._lock:
            noise = self._rng.normal(0.0, self.noise_std, size=3)
        t = (time.monotonic_ns() - self._t0_ns) / 1e9
        phase = 2.0 * math.pi * self.stride_hz * t
        if sensor_type == ACCELEROMETER:
            base = (
                0.8 * math.sin(2.0 * phase),
                0.3 * math.sin(phase),
                STANDARD_GRAVITY + 2.0 * math.sin(2.0 * phase + 0.5),
            )
        else:
            base = (
                1.2 * math.sin(phase + 0.3),
                0.4 * math.sin(2.0 * phase),
                0.2 * math.cos(phase),
            )
        x, y, z = np.asarray(base) + noise
        return (float(x), float(y), float(z))
