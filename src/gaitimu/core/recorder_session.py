"""Coordinator wiring the merger to the CSV logger and rate estimator."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Optional

from ..analysis.rate import SampleRateEstimator
from ..config import GaitImuConfig, SampleRatePreset, resolve_preset
from ..dataio.csv_logger import BufferedSampleLogger, StorageError
from ..dataio.export import export_file, export_recording
from ..sensors.base import SensorHub
from .merger import SensorStreamMerger
from .models import ImuSample

logger = logging.getLogger(__name__)

StartFailure = Literal["unavailable", "busy", "storage", "subscription"]


@dataclass(frozen=True)
class StartResult:
    """Outcome of :meth:`RecordingSession.start`; ``failure`` is set when not ``ok``."""

    ok: bool
    failure: Optional[StartFailure] = None
    path: Optional[Path] = None
    detail: str = ""


@dataclass(frozen=True)
class SessionStatus:
    is_recording: bool
    status_text: str
    target_rate: SampleRatePreset
    sample_rate_hz: float
    file_name: str
    latest_sample: ImuSample
    sample_count: int


class RecordingSession:
    """
    Run one recorder: sensors → merger → (CSV logger, rate estimator).

    Each sample is appended to the logger first and then fed to the
    estimator, on the sensor delivery thread. A storage error raised from
    a threshold flush stops the recording, closes the file (samples that
    could not be written are dropped) and is kept in :attr:`last_error`.
    """

    def __init__(
        self,
        hub: SensorHub,
        config: Optional[GaitImuConfig] = None,
        *,
        on_sample: Optional[Callable[[ImuSample, float], None]] = None,
    ) -> None:
        self.config = (config or GaitImuConfig()).sanitized()
        self.merger = SensorStreamMerger(hub)
        self.estimator = SampleRateEstimator(self.config.window_size)
        self.recorder_log = BufferedSampleLogger(
            self.config.recordings_dir,
            flush_threshold=self.config.flush_threshold,
            background_flush=self.config.background_flush,
            fsync_on_flush=self.config.fsync_on_flush,
        )
        self._on_sample = on_sample

        self._lock = threading.Lock()
        self._recording = False
        self._status_text = "Idle"
        self._preset = self.config.preset
        self._rate_hz = 0.0
        self._latest = ImuSample.zero()
        self._count = 0
        self._file_name = "-"
        self._last_path: Optional[Path] = None
        self.last_error: Optional[Exception] = None

    @property
    def is_available(self) -> bool:
        return self.merger.is_available

    @property
    def is_recording(self) -> bool:
        with self._lock:
            return self._recording

    def select_rate(self, preset: SampleRatePreset | str | int) -> bool:
        """Change the target rate; refused while recording."""
        with self._lock:
            if self._recording:
                logger.warning("Stop recording before changing the sample rate")
                return False
            self._preset = resolve_preset(preset, default=self._preset.key)
        return True

    def start(self) -> StartResult:
        if not self.merger.is_available:
            return StartResult(False, "unavailable", detail="Accelerometer or gyroscope is unavailable")
        if self.is_recording:
            return StartResult(False, "busy", detail="Already recording")

        try:
            path = self.recorder_log.start_new_file()
        except StorageError as exc:
            logger.error("Failed to create CSV: %s", exc)
            return StartResult(False, "storage", detail=str(exc))

        self.estimator.reset()
        with self._lock:
            preset = self._preset
            self._count = 0
            self._rate_hz = 0.0
            self.last_error = None
            self._recording = True
            self._status_text = f"Recording ({preset.hz}Hz)"

        if not self.merger.start(preset.sample_period_us, self._handle_sample):
            self.recorder_log.close()
            with self._lock:
                self._recording = False
                self._status_text = "Idle"
            return StartResult(False, "subscription", path=path, detail="Failed to start recorder")

        with self._lock:
            self._file_name = path.name
            self._last_path = path
        return StartResult(True, path=path)

    def stop(self, status: str = "Stopped") -> None:
        """Stop the sensors and close the recording file."""
        self.merger.stop()
        try:
            self.recorder_log.close()
        finally:
            with self._lock:
                self._recording = False
                self._status_text = status

    def export(self, destination: Path | str) -> Path:
        """Flush and copy the current (or last) recording; raises ``ExportError``."""
        if self.recorder_log.is_open:
            return export_recording(self.recorder_log, destination)
        with self._lock:
            last_path = self._last_path
        return export_file(last_path, destination)

    def clear(self) -> None:
        """Reset the displayed sample and rate."""
        with self._lock:
            self._rate_hz = 0.0
            self._latest = ImuSample.zero()
            self._status_text = "Recording" if self._recording else "Idle"

    def snapshot(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                is_recording=self._recording,
                status_text=self._status_text,
                target_rate=self._preset,
                sample_rate_hz=self._rate_hz,
                file_name=self._file_name,
                latest_sample=self._latest,
                sample_count=self._count,
            )

    def _handle_sample(self, sample: ImuSample) -> None:
        try:
            self.recorder_log.append(sample)
        except StorageError as exc:
            logger.error("Stopping recording after write failure: %s", exc)
            self.merger.stop()
            try:
                self.recorder_log.close()
            except OSError as close_exc:
                logger.error("Recording closed with unwritten samples: %s", close_exc)
            with self._lock:
                self.last_error = exc
                self._recording = False
                self._status_text = "Stopped (write error)"
            return

        hz = self.estimator.on_sample(sample.timestamp_ns)
        with self._lock:
            self._latest = sample
            self._rate_hz = hz
            self._count += 1
        if self._on_sample is not None:
            self._on_sample(sample, hz)
