"""Hand a finished recording to an export destination."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .csv_logger import BufferedSampleLogger

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """There was no recording to export, or copying it failed."""


def export_recording(recorder_log: BufferedSampleLogger, destination: Path | str) -> Path:
    """
    Flush ``recorder_log`` and copy its current file into ``destination``.

    Flushing first guarantees the exported copy holds every sample logged
    so far. Returns the path of the copy.
    """
    recorder_log.flush()
    source = recorder_log.current_file()
    return export_file(source, destination)


def export_file(source: Path | None, destination: Path | str) -> Path:
    """Copy a finalized recording file into the ``destination`` directory."""
    if source is None or not Path(source).exists():
        raise ExportError("No recording file to export")

    dest_dir = Path(destination).expanduser()
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        target = Path(shutil.copy2(source, dest_dir / Path(source).name))
    except OSError as exc:
        raise ExportError(f"Export of {source} failed: {exc}") from exc

    logger.info("Exported %s to %s", source, target)
    return target
