"""Fuse accelerometer and gyroscope events into six-axis samples."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..sensors.base import ACCELEROMETER, GYROSCOPE, SensorEvent, SensorHub
from .models import ImuSample

logger = logging.getLogger(__name__)

SampleCallback = Callable[[ImuSample], None]


class SensorStreamMerger:
    """
    Merge two independently clocked sensor streams into :class:`ImuSample`.

    Every accelerometer or gyroscope event produces exactly one sample that
    pairs the event's fresh vector with the most recent vector of the other
    group, stamped with the event's timestamp. The streams are not
    time-aligned: each sample is the best known state at arrival.

    Both axis groups are zeroed on :meth:`start`, so samples emitted before
    the first event of a group carry zeros for that group.

    The active callback is the only gate for delivery. It is swapped under a
    re-entrant lock that is also held while dispatching, so after
    :meth:`stop` returns no further callback runs. :meth:`stop` may be
    called from inside the callback; the hub is then released once the
    dispatch has unwound, so other delivery threads are never joined while
    they wait on the lock.
    """

    def __init__(self, hub: SensorHub) -> None:
        self._hub = hub
        self._lock = threading.RLock()
        self._on_sample: Optional[SampleCallback] = None
        self._dispatching: Optional[threading.Thread] = None
        self._unregister_pending = False
        self._last_accel: list[float] = [0.0, 0.0, 0.0]
        self._last_gyro: list[float] = [0.0, 0.0, 0.0]

        self.has_accelerometer: bool = hub.has_sensor(ACCELEROMETER)
        self.has_gyroscope: bool = hub.has_sensor(GYROSCOPE)

    @property
    def is_available(self) -> bool:
        return self.has_accelerometer and self.has_gyroscope

    @property
    def is_recording(self) -> bool:
        with self._lock:
            return self._on_sample is not None

    def start(self, sample_period_us: int, on_sample: SampleCallback) -> bool:
        """
        Subscribe to both sensors and begin calling ``on_sample``.

        Returns ``False`` without side effects when a sensor is missing or
        the merger is already started (or still releasing the hub after an
        in-callback :meth:`stop`), and ``False`` after unwinding any
        partial subscription when registration fails.
        """
        with self._lock:
            if not self.is_available or self._on_sample is not None or self._unregister_pending:
                return False

            self._last_accel = [0.0, 0.0, 0.0]
            self._last_gyro = [0.0, 0.0, 0.0]
            self._on_sample = on_sample

            registered = self._hub.register_listener(self, ACCELEROMETER, sample_period_us)
            if registered:
                registered = self._hub.register_listener(self, GYROSCOPE, sample_period_us)

            if not registered:
                self._on_sample = None

        if not registered:
            logger.error("Sensor registration failed; unwinding subscription")
            self._hub.unregister_listener(self)
            return False

        logger.info("Merger started at %d us period", sample_period_us)
        return True

    def stop(self) -> None:
        """Unsubscribe from the hub and drop the callback. Always safe to call."""
        with self._lock:
            was_recording = self._on_sample is not None
            self._on_sample = None
            if self._dispatching is threading.current_thread():
                self._unregister_pending = True
                if was_recording:
                    logger.info("Merger stopped from its callback")
                return
        # Outside the lock: the hub may join delivery threads blocked on it.
        self._hub.unregister_listener(self)
        if was_recording:
            logger.info("Merger stopped")

    def on_sensor_event(self, event: SensorEvent) -> None:
        """Hub callback: update the matching axis group and emit one sample."""
        release = False
        try:
            with self._lock:
                on_sample = self._on_sample
                if on_sample is None:
                    return

                if event.sensor_type == ACCELEROMETER:
                    target = self._last_accel
                elif event.sensor_type == GYROSCOPE:
                    target = self._last_gyro
                else:
                    return

                target[0], target[1], target[2] = (float(v) for v in event.values[:3])

                sample = ImuSample(
                    timestamp_ns=int(event.timestamp_ns),
                    ax=self._last_accel[0],
                    ay=self._last_accel[1],
                    az=self._last_accel[2],
                    gx=self._last_gyro[0],
                    gy=self._last_gyro[1],
                    gz=self._last_gyro[2],
                )
                outer = self._dispatching
                self._dispatching = threading.current_thread()
                try:
                    on_sample(sample)
                finally:
                    self._dispatching = outer
                    if outer is None and self._unregister_pending:
                        self._unregister_pending = False
                        release = True
        finally:
            if release:
                self._hub.unregister_listener(self)
