"""Core acquisition pipeline: sample model, ring buffer, and merger.

The merger fuses accelerometer and gyroscope events into six-axis samples.
:mod:`gaitimu.core.recorder_session` (imported directly, it depends on the
analysis and dataio packages) fans them out to the CSV logger and the
sample-rate estimator.
"""

from .models import CSV_HEADER, ImuSample
from .ringbuffer import RingBuffer
from .merger import SensorStreamMerger

__all__ = [
    "CSV_HEADER",
    "ImuSample",
    "RingBuffer",
    "SensorStreamMerger",
]
