"""Sensor hubs that deliver accelerometer and gyroscope events.

:mod:`base` defines the :class:`SensorHub` protocol and :class:`SensorEvent`.
:mod:`simulated` synthesises gait-like signals for demos and tests, and
:mod:`mpu6050` polls an MPU-6050 over I²C.
"""

from .base import ACCELEROMETER, GYROSCOPE, SensorEvent, SensorEventListener, SensorHub

__all__ = ["ACCELEROMETER", "GYROSCOPE", "SensorEvent", "SensorEventListener", "SensorHub"]
