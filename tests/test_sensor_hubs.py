from __future__ import annotations

import threading
import time
from typing import Dict, List, Tuple

import pytest

from gaitimu.core.merger import SensorStreamMerger
from gaitimu.sensors.base import ACCELEROMETER, GYROSCOPE, SensorEvent
from gaitimu.sensors.mpu6050 import (
    ACCEL_XOUT_H,
    GYRO_XOUT_H,
    SMPLRT_DIV,
    WHO_AM_I,
    Mpu6050SensorHub,
)
from gaitimu.sensors.simulated import SimulatedSensorHub


class _Collector:
    def __init__(self) -> None:
        self.events: List[SensorEvent] = []
        self._lock = threading.Lock()

    def on_sensor_event(self, event: SensorEvent) -> None:
        with self._lock:
            self.events.append(event)

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        deadline = time.time() + timeout
        while time.time() < deadline:
            with self._lock:
                if len(self.events) >= count:
                    return True
            time.sleep(0.01)
        return False


class FakeBus:
    """Stand-in for ``smbus2.SMBus`` answering like an MPU-6050."""

    def __init__(self, who_am_i: int = 0x68, fail: bool = False) -> None:
        self.who_am_i = who_am_i
        self.fail = fail
        self.closed = 0
        self.writes: List[Tuple[int, int, int]] = []
        self.blocks: Dict[int, List[int]] = {
            # +1 g on X, -1 g on Z
            ACCEL_XOUT_H: [0x40, 0x00, 0x00, 0x00, 0xC0, 0x00],
            # +1 °/s on X (131 LSB)
            GYRO_XOUT_H: [0x00, 0x83, 0x00, 0x00, 0x00, 0x00],
        }

    def read_byte_data(self, addr: int, reg: int) -> int:
        if self.fail:
            raise OSError(121, "Remote I/O error")
        assert reg == WHO_AM_I
        return self.who_am_i

    def write_byte_data(self, addr: int, reg: int, val: int) -> None:
        self.writes.append((addr, reg, val))

    def read_i2c_block_data(self, addr: int, reg: int, length: int) -> List[int]:
        return self.blocks[reg][:length]

    def close(self) -> None:
        self.closed += 1


def test_simulated_hub_delivers_events_on_background_thread() -> None:
    hub = SimulatedSensorHub(seed=1)
    collector = _Collector()
    assert hub.register_listener(collector, ACCELEROMETER, 5_000)
    assert collector.wait_for(3)
    hub.unregister_listener(collector)

    count = len(collector.events)
    time.sleep(0.05)
    assert len(collector.events) == count
    assert all(e.sensor_type == ACCELEROMETER and len(e.values) == 3 for e in collector.events)
    stamps = [e.timestamp_ns for e in collector.events]
    assert stamps == sorted(stamps)


def test_simulated_hub_missing_and_refused_sensors() -> None:
    hub = SimulatedSensorHub(missing=(GYROSCOPE,), refuse=(ACCELEROMETER,))
    collector = _Collector()
    assert not hub.has_sensor(GYROSCOPE)
    assert not hub.has_sensor("magnetometer")
    assert hub.register_listener(collector, GYROSCOPE, 10_000) is False
    assert hub.register_listener(collector, ACCELEROMETER, 10_000) is False


def test_merger_end_to_end_with_simulated_hub() -> None:
    hub = SimulatedSensorHub(seed=2)
    merger = SensorStreamMerger(hub)
    samples = []
    lock = threading.Lock()

    def on_sample(sample) -> None:
        with lock:
            samples.append(sample)

    assert merger.start(5_000, on_sample)
    deadline = time.time() + 2.0
    while time.time() < deadline:
        with lock:
            if len(samples) >= 10:
                break
        time.sleep(0.01)
    merger.stop()
    hub.close()

    assert len(samples) >= 10
    # Gravity dominates az once the accelerometer has reported.
    assert any(s.az > 5.0 for s in samples)


def test_mpu6050_hub_converts_to_si_units() -> None:
    bus = FakeBus()
    hub = Mpu6050SensorHub(bus=bus)
    assert hub.has_sensor(ACCELEROMETER) and hub.has_sensor(GYROSCOPE)

    accel, gyro = _Collector(), _Collector()
    assert hub.register_listener(accel, ACCELEROMETER, 10_000)
    assert hub.register_listener(gyro, GYROSCOPE, 10_000)
    assert accel.wait_for(1) and gyro.wait_for(1)
    hub.close()

    assert accel.events[0].values == pytest.approx((9.80665, 0.0, -9.80665))
    assert gyro.events[0].values == pytest.approx((0.017453292519943295, 0.0, 0.0))
    # 100 Hz request → SMPLRT_DIV = 1000 / 100 - 1
    assert (0x68, SMPLRT_DIV, 9) in bus.writes


def test_mpu6050_hub_unavailable_when_probe_fails() -> None:
    assert not Mpu6050SensorHub(bus=FakeBus(fail=True)).has_sensor(ACCELEROMETER)
    hub = Mpu6050SensorHub(bus=FakeBus(who_am_i=0x00))
    assert not hub.has_sensor(GYROSCOPE)
    assert not SensorStreamMerger(hub).is_available


def test_stop_inside_callback_releases_delivery_thread_promptly() -> None:
    hub = SimulatedSensorHub(seed=3)
    merger = SensorStreamMerger(hub)
    stopped = threading.Event()
    delivery: List[threading.Thread] = []

    def on_sample(sample) -> None:
        delivery.append(threading.current_thread())
        merger.stop()
        stopped.set()

    assert merger.start(2_000, on_sample)
    assert stopped.wait(2.0)
    started = time.monotonic()
    delivery[0].join(0.5)
    elapsed = time.monotonic() - started
    hub.close()

    assert not delivery[0].is_alive()
    assert elapsed < 0.5
    assert len(delivery) == 1
    assert not merger.is_recording


def test_mpu6050_hub_closes_the_bus_it_opened(monkeypatch) -> None:
    from gaitimu.sensors import mpu6050

    opened: List[FakeBus] = []

    def open_bus(bus_id: int) -> FakeBus:
        opened.append(FakeBus())
        return opened[-1]

    monkeypatch.setattr(mpu6050, "SMBus", open_bus)
    hub = Mpu6050SensorHub(bus_id=1)
    assert hub.has_sensor(ACCELEROMETER)
    collector = _Collector()
    assert hub.register_listener(collector, ACCELEROMETER, 10_000)
    assert collector.wait_for(1)
    hub.close()
    hub.close()

    assert opened[0].closed == 1


def test_mpu6050_hub_leaves_injected_bus_open() -> None:
    bus = FakeBus()
    Mpu6050SensorHub(bus=bus).close()
    assert bus.closed == 0
