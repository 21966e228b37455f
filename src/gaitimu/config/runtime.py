"""Runtime configuration for the acquisition pipeline."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

from .paths import AppPaths
from .sampling import DEFAULT_PRESET_KEY, SampleRatePreset, resolve_preset

DEFAULT_WINDOW_SIZE = 20
DEFAULT_FLUSH_THRESHOLD = 300


@dataclass(slots=True)
class GaitImuConfig:
    """
    Tuning knobs for how samples are acquired, rate-estimated and logged.

    ``sample_rate`` is a preset key (see :mod:`gaitimu.config.sampling`).
    ``output_dir`` of ``None`` means :attr:`AppPaths.recordings`.
    """

    sample_rate: str = DEFAULT_PRESET_KEY
    window_size: int = DEFAULT_WINDOW_SIZE
    flush_threshold: int = DEFAULT_FLUSH_THRESHOLD
    background_flush: bool = False
    fsync_on_flush: bool = False
    output_dir: Optional[Path] = None

    @property
    def preset(self) -> SampleRatePreset:
        return resolve_preset(self.sample_rate)

    @property
    def recordings_dir(self) -> Path:
        if self.output_dir is not None:
            return Path(self.output_dir).expanduser()
        return AppPaths().recordings

    def sanitized(self) -> GaitImuConfig:
        """Return a copy with invalid values replaced by safe defaults."""
        return GaitImuConfig(
            sample_rate=resolve_preset(self.sample_rate).key,
            window_size=_positive_int(self.window_size, DEFAULT_WINDOW_SIZE),
            flush_threshold=_positive_int(self.flush_threshold, DEFAULT_FLUSH_THRESHOLD),
            background_flush=bool(self.background_flush),
            fsync_on_flush=bool(self.fsync_on_flush),
            output_dir=Path(self.output_dir).expanduser() if self.output_dir else None,
        )

    def with_overrides(self, **overrides: Any) -> GaitImuConfig:
        """Apply non-``None`` overrides (e.g. from CLI flags) and sanitize."""
        payload = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **payload).sanitized()


def _positive_int(value: Any, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`GaitImuConfig`."""
    return {f.name for f in fields(GaitImuConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the ``recording`` and ``sampling`` blocks into one mapping."""
    merged: MutableMapping[str, Any] = {}
    for key, value in data.items():
        if key == "recording" and isinstance(value, Mapping):
            merged.update(value)
        elif key == "sampling" and isinstance(value, Mapping):
            if "rate" in value:
                merged["sample_rate"] = value["rate"]
        else:
            merged[key] = value
    return merged


def config_from_mapping(data: Mapping[str, Any] | None) -> GaitImuConfig:
    """Build :class:`GaitImuConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return GaitImuConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return GaitImuConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> GaitImuConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`GaitImuConfig`.
    """
    if path is None:
        return GaitImuConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return GaitImuConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["GaitImuConfig", "config_from_mapping", "load_config"]
