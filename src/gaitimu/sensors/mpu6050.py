"""
MPU-6050 sensor hub over I²C.

Accelerometer and gyroscope are polled on separate threads at their
requested periods and converted to SI units:

  - accel raw → g = raw / 16384.0, then * 9.80665 → m/s² (±2 g range)
  - gyro  raw → dps = raw / 131.0, then radians   → rad/s (±250 °/s range)

Timestamps come from ``time.monotonic_ns()`` at read time.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Optional, Tuple

from smbus2 import SMBus

from .base import ACCELEROMETER, GYROSCOPE
from .polling import PollingSensorHub

logger = logging.getLogger(__name__)

# ---------------------------
# MPU6050 register constants
# ---------------------------
WHO_AM_I       = 0x75
PWR_MGMT_1     = 0x6B
SMPLRT_DIV     = 0x19
CONFIG         = 0x1A
GYRO_CONFIG    = 0x1B
ACCEL_CONFIG   = 0x1C

ACCEL_XOUT_H   = 0x3B
GYRO_XOUT_H    = 0x43

# Scale factors for ±2g and ±250 dps
ACC_SF = 16384.0           # LSB/g
GYR_SF = 131.0             # LSB/(deg/s)
G_TO_MS2 = 9.80665

DEFAULT_ADDRESS = 0x68
DLPF_DEFAULT = 3           # ≈44 Hz bandwidth
EXPECTED_WHO_AM_I = {0x68, 0x69, 0x70, 0x72}

# With DLPF enabled, internal rate is 1 kHz → SampleRate = 1000/(1+SMPLRT_DIV)
INTERNAL_RATE_HZ = 1000.0


def _to_i16(hi: int, lo: int) -> int:
    v = (hi << 8) | lo
    if v & 0x8000:
        v = -((~v & 0xFFFF) + 1)
    return v


class MPU6050:
    """Minimal MPU6050 driver using smbus2 (no DMP)."""

    def __init__(self, bus: SMBus, addr: int = DEFAULT_ADDRESS):
        self.bus = bus
        self.addr = addr

    def _write_u8(self, reg: int, val: int) -> None:
        self.bus.write_byte_data(self.addr, reg, val & 0xFF)

    def _read_u8(self, reg: int) -> int:
        return self.bus.read_byte_data(self.addr, reg)

    def _read_vector(self, reg_h: int) -> Tuple[int, int, int]:
        data = self.bus.read_i2c_block_data(self.addr, reg_h, 6)
        return (
            _to_i16(data[0], data[1]),
            _to_i16(data[2], data[3]),
            _to_i16(data[4], data[5]),
        )

    def who_am_i(self) -> int:
        return self._read_u8(WHO_AM_I)

    def initialize(self, dlpf_cfg: int = DLPF_DEFAULT, rate_hz: float = 100.0) -> Tuple[int, float]:
        """
        Wake the device at ±2 g / ±250 °/s and set the sample-rate divider.

        Returns (smplrt_div, actual_rate_hz)
        """
        # Wake up and select PLL with X‑gyro as clock source (datasheet §5.5)
        self._write_u8(PWR_MGMT_1, 0x01)
        time.sleep(0.05)

        self._write_u8(CONFIG, dlpf_cfg & 0x07)
        self._write_u8(GYRO_CONFIG, 0x00)
        self._write_u8(ACCEL_CONFIG, 0x00)

        div = int(round(INTERNAL_RATE_HZ / max(1.0, rate_hz)) - 1)
        div = min(255, max(0, div))
        self._write_u8(SMPLRT_DIV, div)
        return div, INTERNAL_RATE_HZ / (1.0 + div)

    def read_accel(self) -> Tuple[int, int, int]:
        return self._read_vector(ACCEL_XOUT_H)

    def read_gyro(self) -> Tuple[int, int, int]:
        return self._read_vector(GYRO_XOUT_H)


class Mpu6050SensorHub(PollingSensorHub):
    """
    Sensor hub backed by a single MPU-6050.

    The device is probed once at construction; if ``WHO_AM_I`` cannot be
    read (or is unexpected) both sensor types report as unavailable. The
    device is configured on the first registration using the fastest
    requested rate.
    """

    thread_prefix = "GaitImuMpu6050"

    def __init__(
        self,
        bus_id: int = 1,
        address: int = DEFAULT_ADDRESS,
        *,
        bus: Optional[SMBus] = None,
        dlpf_cfg: int = DLPF_DEFAULT,
    ) -> None:
        super().__init__()
        self._bus_lock = threading.Lock()
        self._dlpf_cfg = dlpf_cfg
        self._configured_rate_hz: Optional[float] = None
        self._device: Optional[MPU6050] = None
        self._owned_bus: Optional[SMBus] = None

        if bus is None:
            try:
                bus = self._owned_bus = SMBus(bus_id)
            except OSError as exc:
                logger.warning("I2C bus %s not available: %s", bus_id, exc)
                return

        device = MPU6050(bus, address)
        try:
            who = device.who_am_i()
        except OSError as exc:
            logger.warning("No MPU-6050 at 0x%02X on bus %s: %s", address, bus_id, exc)
            return
        if who not in EXPECTED_WHO_AM_I:
            logger.warning("Unexpected WHO_AM_I 0x%02X at 0x%02X", who, address)
            return
        self._device = device
        logger.info("MPU-6050 found at 0x%02X (WHO_AM_I=0x%02X)", address, who)

    def close(self) -> None:
        """Stop every poller and release the I2C bus opened by this hub."""
        super().close()
        owned, self._owned_bus = self._owned_bus, None
        if owned is not None:
            with self._bus_lock:
                owned.close()

    def has_sensor(self, sensor_type: str) -> bool:
        return self._device is not None and sensor_type in (ACCELEROMETER, GYROSCOPE)

    def _prepare(self, sensor_type: str, sample_period_us: int) -> None:
        assert self._device is not None
        rate_hz = 1e6 / max(1, sample_period_us)
        if self._configured_rate_hz is not None and self._configured_rate_hz >= rate_hz:
            return
        with self._bus_lock:
            div, actual = self._device.initialize(self._dlpf_cfg, rate_hz)
        self._configured_rate_hz = rate_hz
        logger.info("MPU-6050 configured: SMPLRT_DIV=%d (%.1f Hz)", div, actual)

    def _read(self, sensor_type: str) -> tuple[float, float, float]:
        assert self._device is not None
        with self._bus_lock:
            if sensor_type == ACCELEROMETER:
                raw = self._device.read_accel()
            else:
                raw = self._device.read_gyro()
        if sensor_type == ACCELEROMETER:
            return tuple(v / ACC_SF * G_TO_MS2 for v in raw)  # type: ignore[return-value]
        return tuple(math.radians(v / GYR_SF) for v in raw)  # type: ignore[return-value]
