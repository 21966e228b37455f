"""Helpers for constructing recording file paths."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

RECORDING_PREFIX = "imu"
RECORDING_EXTENSION = "csv"


def _format_start_ts(start_dt: datetime) -> str:
    """Return the canonical timestamp string used in recording filenames."""
    return start_dt.strftime("%Y%m%d_%H%M%S")


def recording_filename(
    start_dt: datetime,
    extension: str = RECORDING_EXTENSION,
    index: int = 0,
) -> str:
    """
    Return the filename for a recording started at ``start_dt``.

    Example: "imu_20251204_153045.csv"; ``index`` > 0 appends "_<index>"
    for recordings started within the same second.
    """
    stem = f"{RECORDING_PREFIX}_{_format_start_ts(start_dt)}"
    if index > 0:
        stem = f"{stem}_{index}"
    return f"{stem}.{extension.lstrip('.')}"


def next_recording_path(
    out_dir: Path,
    start_dt: Optional[datetime] = None,
    extension: str = RECORDING_EXTENSION,
) -> Path:
    """Return the first recording path in ``out_dir`` that does not exist yet."""
    start_dt = start_dt or datetime.now()
    index = 0
    while True:
        candidate = Path(out_dir) / recording_filename(start_dt, extension, index)
        if not candidate.exists():
            return candidate
        index += 1
