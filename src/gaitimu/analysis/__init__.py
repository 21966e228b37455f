"""Streaming statistics computed over the sample stream.

- :mod:`rate` estimates the effective sampling rate from timestamps.
"""

from .rate import SampleRateEstimator

__all__ = ["SampleRateEstimator"]
