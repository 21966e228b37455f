"""Sampling-rate presets offered to the sensor hub."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class SampleRatePreset:
    """User-facing rate preset; the period is only a hint to the hardware."""

    key: str
    hz: int

    @property
    def sample_period_us(self) -> int:
        return 1_000_000 // self.hz


SAMPLE_RATE_PRESETS: Dict[str, SampleRatePreset] = {
    "hz_50": SampleRatePreset(key="hz_50", hz=50),
    "hz_100": SampleRatePreset(key="hz_100", hz=100),
}

DEFAULT_PRESET_KEY = "hz_50"


def resolve_preset(value: Any, default: str = DEFAULT_PRESET_KEY) -> SampleRatePreset:
    """
    Resolve ``value`` into a :class:`SampleRatePreset`.

    Accepts preset keys (``"hz_100"``), bare numbers (``100``, ``"100"``)
    and unit-suffixed strings (``"100Hz"``, ``"100-hz"``). Anything else
    falls back to ``default``.
    """
    if isinstance(value, SampleRatePreset):
        return value

    fallback = SAMPLE_RATE_PRESETS.get(default, SAMPLE_RATE_PRESETS[DEFAULT_PRESET_KEY])
    if value is None or isinstance(value, bool):
        return fallback

    raw = str(value).strip().lower().replace("-", "_").replace(" ", "")
    if raw in SAMPLE_RATE_PRESETS:
        return SAMPLE_RATE_PRESETS[raw]

    # "100hz" / "100_hz" / "100.0"
    raw = raw.removesuffix("hz").rstrip("_")
    try:
        hz = float(raw)
    except ValueError:
        return fallback

    for preset in SAMPLE_RATE_PRESETS.values():
        if preset.hz == hz:
            return preset
    return fallback
