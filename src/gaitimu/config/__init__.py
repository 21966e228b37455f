"""Configuration objects and helpers for GaitIMU.

Settings are plain dataclasses that can be loaded from a small YAML file:
- :mod:`sampling` defines the 50 Hz / 100 Hz sampling presets
- :mod:`runtime` holds the estimator window, logger flush threshold and
  output directory
- :mod:`paths` centralises where recordings live
"""

from .runtime import GaitImuConfig, config_from_mapping, load_config
from .sampling import SAMPLE_RATE_PRESETS, SampleRatePreset, resolve_preset

__all__ = [
    "GaitImuConfig",
    "config_from_mapping",
    "load_config",
    "SAMPLE_RATE_PRESETS",
    "SampleRatePreset",
    "resolve_preset",
]
