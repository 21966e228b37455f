"""
Matplotlib view of a GaitIMU recording.

Two stacked panels share the time axis (seconds from the first sample):
accelerometer (m/s²) on top and gyroscope (rad/s) below.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..dataio.log_loader import load_recording

ACCEL_COLUMNS: Sequence[tuple[int, str]] = ((1, "ax"), (2, "ay"), (3, "az"))
GYRO_COLUMNS: Sequence[tuple[int, str]] = ((4, "gx"), (5, "gy"), (6, "gz"))


def find_latest_recording(search_root: Path) -> Optional[Path]:
    candidates = list(Path(search_root).glob("imu_*.csv"))
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def build_figure(data: np.ndarray, title: str = ""):
    fig, (ax_acc, ax_gyro) = plt.subplots(2, 1, sharex=True, figsize=(10, 6))
    t_s = (data[:, 0] - data[0, 0]) / 1e9 if data.shape[0] else data[:, 0]

    for col, name in ACCEL_COLUMNS:
        ax_acc.plot(t_s, data[:, col], label=name, linewidth=0.8)
    for col, name in GYRO_COLUMNS:
        ax_gyro.plot(t_s, data[:, col], label=name, linewidth=0.8)

    ax_acc.set_ylabel("Acceleration (m/s²)")
    ax_gyro.set_ylabel("Angular velocity (rad/s)")
    ax_gyro.set_xlabel("Time (s)")
    for axis in (ax_acc, ax_gyro):
        axis.grid(True, alpha=0.3)
        axis.legend(loc="upper right")
    if title:
        fig.suptitle(title)
    fig.tight_layout()
    return fig


def plot_recording(path: Path, output: Optional[Path] = None) -> Optional[Path]:
    """Plot ``path``; save to ``output`` if given, otherwise show the window."""
    data = load_recording(path)
    fig = build_figure(data, title=Path(path).name)
    if output is None:
        plt.show()
        return None
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output, dpi=120)
    plt.close(fig)
    return output
