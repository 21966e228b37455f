"""Thread-per-sensor polling shared by the simulated and I²C hubs."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from .base import SensorEvent, SensorEventListener, monotonic_controller

logger = logging.getLogger(__name__)


@dataclass
class _PollerHandle:
    thread: threading.Thread
    stop_event: threading.Event

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        # A listener may unregister from inside its own callback.
        if join and self.thread is not threading.current_thread():
            self.thread.join(timeout)


class PollingSensorHub:
    """
    Base hub that samples each registered sensor type on its own thread.

    Subclasses implement :meth:`has_sensor`, :meth:`_read` and optionally
    :meth:`_prepare`. Each ``(listener, sensor_type)`` registration gets a
    daemon thread that reads at the requested period and calls
    ``listener.on_sensor_event`` from that thread.
    """

    thread_prefix = "GaitImuPoller"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._pollers: Dict[SensorEventListener, Dict[str, _PollerHandle]] = {}

    # ------------------------------------------------------------------ hooks
    def has_sensor(self, sensor_type: str) -> bool:  # pragma: no cover - abstract
        raise NotImplementedError

    def _prepare(self, sensor_type: str, sample_period_us: int) -> None:
        """Called before a poller starts; raise ``OSError`` to refuse."""

    def _read(self, sensor_type: str) -> tuple[float, float, float]:  # pragma: no cover - abstract
        raise NotImplementedError

    # ------------------------------------------------------------- SensorHub
    def register_listener(
        self,
        listener: SensorEventListener,
        sensor_type: str,
        sample_period_us: int,
    ) -> bool:
        if not self.has_sensor(sensor_type):
            logger.warning("Sensor %s not present; registration refused", sensor_type)
            return False

        with self._lock:
            per_listener = self._pollers.setdefault(listener, {})
            if sensor_type in per_listener:
                return True
            try:
                self._prepare(sensor_type, sample_period_us)
            except OSError as exc:
                logger.error("Failed to prepare %s: %s", sensor_type, exc)
                if not per_listener:
                    del self._pollers[listener]
                return False

            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._poll_loop,
                args=(listener, sensor_type, sample_period_us, stop_event),
                name=f"{self.thread_prefix}({sensor_type})",
                daemon=True,
            )
            per_listener[sensor_type] = _PollerHandle(thread=thread, stop_event=stop_event)
            thread.start()

        logger.debug("Registered %s at %d us", sensor_type, sample_period_us)
        return True

    def unregister_listener(self, listener: SensorEventListener) -> None:
        with self._lock:
            handles = self._pollers.pop(listener, {})
        for handle in handles.values():
            handle.stop(join=True, timeout=1.0)
        if handles:
            logger.debug("Unregistered %d sensor stream(s)", len(handles))

    def close(self) -> None:
        """Stop every poller."""
        with self._lock:
            listeners = list(self._pollers)
        for listener in listeners:
            self.unregister_listener(listener)

    # --------------------------------------------------------------- threads
    def _poll_loop(
        self,
        listener: SensorEventListener,
        sensor_type: str,
        sample_period_us: int,
        stop_event: threading.Event,
    ) -> None:
        for target_ns in monotonic_controller(sample_period_us):
            if stop_event.is_set():
                break
            try:
                values = self._read(sensor_type)
            except OSError as exc:
                # Transient bus errors: skip this tick and keep polling.
                logger.warning("Read failed for %s: %s", sensor_type, exc)
            else:
                event = SensorEvent(
                    sensor_type=sensor_type,
                    timestamp_ns=time.monotonic_ns(),
                    values=values,
                )
                try:
                    listener.on_sensor_event(event)
                except Exception:
                    logger.exception("Listener failed on %s event", sensor_type)

            delay_ns = target_ns - time.monotonic_ns()
            if delay_ns > 0:
                stop_event.wait(delay_ns / 1e9)
