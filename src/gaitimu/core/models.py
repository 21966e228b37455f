"""Shared dataclasses for GaitIMU samples."""

from __future__ import annotations

from dataclasses import dataclass

CSV_HEADER: tuple[str, ...] = ("t_ns", "ax", "ay", "az", "gx", "gy", "gz")


@dataclass(frozen=True, slots=True)
class ImuSample:
    """
    One fused six-axis reading.

    ``timestamp_ns`` comes from the sensor's monotonic clock (not wall
    time). Acceleration is in m/s² and includes gravity; angular velocity
    is in rad/s.
    """

    timestamp_ns: int
    ax: float
    ay: float
    az: float
    gx: float
    gy: float
    gz: float

    @classmethod
    def zero(cls) -> ImuSample:
        return cls(0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    @property
    def accel(self) -> tuple[float, float, float]:
        return (self.ax, self.ay, self.az)

    @property
    def gyro(self) -> tuple[float, float, float]:
        return (self.gx, self.gy, self.gz)

    def to_row(self) -> tuple[int | float, ...]:
        """Return the fields in :data:`CSV_HEADER` order."""
        return (self.timestamp_ns, self.ax, self.ay, self.az, self.gx, self.gy, self.gz)
