"""Utilities for loading recorded IMU CSV files."""

import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from ..core.models import CSV_HEADER
from .csv_logger import HEADER_LINE

NS_PER_S = 1e9


@dataclass(frozen=True)
class RecordingSummary:
    path: Path
    sample_count: int
    duration_s: float
    mean_rate_hz: float


def load_recording(path: Path) -> np.ndarray:
    """
    Load a recording written by :class:`BufferedSampleLogger`.

    Returns an ``(N, 7)`` float64 array in header order. Raises
    ``ValueError`` if the first line is not the expected header.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        header = f.readline().strip()
        if header != HEADER_LINE:
            raise ValueError(f"{path} does not start with header {HEADER_LINE!r}")
        rest = f.read()

    if not rest.strip():
        return np.empty((0, len(CSV_HEADER)))
    return np.loadtxt(io.StringIO(rest), delimiter=",", ndmin=2)


def summarize_recording(path: Path) -> RecordingSummary:
    """Sample count, duration and mean rate (from timestamp differences)."""
    data = load_recording(path)
    count = int(data.shape[0])
    if count < 2:
        return RecordingSummary(Path(path), count, 0.0, 0.0)

    deltas = np.diff(data[:, 0])
    deltas = deltas[deltas > 0]
    duration_s = float(data[-1, 0] - data[0, 0]) / NS_PER_S
    mean_rate = float(NS_PER_S / deltas.mean()) if deltas.size else 0.0
    return RecordingSummary(Path(path), count, duration_s, mean_rate)
