from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Set, Tuple

import pytest

from gaitimu.sensors.base import ACCELEROMETER, GYROSCOPE, SensorEvent, SensorEventListener


class FakeSensorHub:
    """In-process hub: events are delivered synchronously by :meth:`emit`."""

    def __init__(
        self,
        sensors: Iterable[str] = (ACCELEROMETER, GYROSCOPE),
        refuse: Iterable[str] = (),
    ) -> None:
        self.sensors = set(sensors)
        self.refuse = set(refuse)
        self.listeners: Dict[SensorEventListener, Set[str]] = {}
        self.register_calls: List[Tuple[str, int]] = []
        self.unregister_calls = 0

    def has_sensor(self, sensor_type: str) -> bool:
        return sensor_type in self.sensors

    def register_listener(self, listener: SensorEventListener, sensor_type: str, sample_period_us: int) -> bool:
        self.register_calls.append((sensor_type, sample_period_us))
        if sensor_type in self.refuse:
            return False
        self.listeners.setdefault(listener, set()).add(sensor_type)
        return True

    def unregister_listener(self, listener: SensorEventListener) -> None:
        self.unregister_calls += 1
        self.listeners.pop(listener, None)

    def emit(self, sensor_type: str, timestamp_ns: int, values: Tuple[float, float, float]) -> None:
        event = SensorEvent(sensor_type=sensor_type, timestamp_ns=timestamp_ns, values=values)
        for listener, types in list(self.listeners.items()):
            if sensor_type in types:
                listener.on_sensor_event(event)


@pytest.fixture
def fake_hub() -> FakeSensorHub:
    return FakeSensorHub()


@pytest.fixture
def make_hub() -> Callable[..., FakeSensorHub]:
    return FakeSensorHub
