"""Buffered CSV persistence of the fused sample stream."""

from __future__ import annotations

import csv
import logging
import os
import queue
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from ..core.models import CSV_HEADER, ImuSample
from ..tools.debug import time_block
from .file_paths import RECORDING_EXTENSION, next_recording_path

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_THRESHOLD = 300
HEADER_LINE = ",".join(CSV_HEADER)

Row = Sequence[object]


class StorageError(OSError):
    """Creating or writing the recording file failed."""


class _BackgroundWriter:
    """Single writer thread that persists batches handed over by the logger.

    The sensor thread only enqueues; slow storage cannot stall delivery.
    After a write error, later batches are kept (not written) so that the
    owner can requeue every unwritten row in order.
    """

    def __init__(self, write_batch: Callable[[List[Row]], None], name: str) -> None:
        self._write_batch = write_batch
        self._q: "queue.Queue[Optional[List[Row]]]" = queue.Queue()
        self._error: Optional[BaseException] = None
        self._unwritten: List[Row] = []
        self._t = threading.Thread(target=self._run, name=name, daemon=True)
        self._t.start()

    def submit(self, batch: List[Row]) -> None:
        self._q.put(batch)

    def drain(self) -> tuple[Optional[BaseException], List[Row]]:
        """Wait for queued batches; return and reset (error, unwritten rows)."""
        self._q.join()
        error, unwritten = self._error, self._unwritten
        self._error, self._unwritten = None, []
        return error, unwritten

    def stop(self) -> None:
        self._q.put(None)
        self._t.join()

    def _run(self) -> None:
        while True:
            batch = self._q.get()
            try:
                if batch is None:
                    # None is a sentinel pushed by stop().
                    return
                if self._error is not None:
                    self._unwritten.extend(batch)
                    continue
                try:
                    self._write_batch(batch)
                except OSError as exc:
                    logger.error("Background flush failed: %s", exc)
                    self._error = exc
                    self._unwritten.extend(batch)
            finally:
                self._q.task_done()


class BufferedSampleLogger:
    """
    Append samples to an in-memory line buffer and persist them in batches.

    At most one destination file is open at a time. :meth:`append` is a
    silent no-op while no file is open; the caller only logs while
    recording.

    Parameters
    ----------
    output_dir:
        Directory receiving ``imu_<YYYYMMDD>_<HHMMSS>.csv`` files.
    flush_threshold:
        Default buffer length that triggers a flush from :meth:`append`.
    background_flush:
        Hand threshold flushes to a writer thread instead of writing inline.
    fsync_on_flush:
        Call ``os.fsync`` after every flush (slower, more durable).
    """

    def __init__(
        self,
        output_dir: Path | str,
        *,
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
        background_flush: bool = False,
        fsync_on_flush: bool = False,
        extension: str = RECORDING_EXTENSION,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if flush_threshold < 1:
            raise ValueError(f"flush_threshold must be >= 1, got {flush_threshold}")
        self.output_dir = Path(output_dir).expanduser()
        self.flush_threshold = flush_threshold
        self.background_flush = background_flush
        self.fsync_on_flush = fsync_on_flush
        self.extension = extension
        self._clock = clock

        self._lock = threading.RLock()
        self._fh: Optional[TextIO] = None
        self._path: Optional[Path] = None
        self._rows: List[Row] = []
        self._csv = None
        self._writer: Optional[_BackgroundWriter] = None

    # ------------------------------------------------------------------ state
    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._fh is not None

    @property
    def buffered_lines(self) -> int:
        with self._lock:
            return len(self._rows)

    def current_file(self) -> Optional[Path]:
        """Return the active recording path, or ``None`` when closed."""
        with self._lock:
            return self._path

    # ------------------------------------------------------------- lifecycle
    def start_new_file(self) -> Path:
        """
        Close any open recording and start a new one with the CSV header.

        The header is flushed before returning. Raises :class:`StorageError`
        if the file cannot be created; the logger then stays closed.
        """
        with self._lock:
            self.close()

            fh: Optional[TextIO] = None
            path: Optional[Path] = None
            try:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                path = next_recording_path(self.output_dir, self._clock(), self.extension)
                fh = path.open("x", encoding="utf-8", newline="")
                csv_out = csv.writer(fh, lineterminator="\n")
                csv_out.writerow(CSV_HEADER)
                fh.flush()
                if self.fsync_on_flush:
                    os.fsync(fh.fileno())
            except OSError as exc:
                if fh is not None:
                    fh.close()
                    path.unlink(missing_ok=True)  # type: ignore[union-attr]
                raise StorageError(f"Failed to create recording in {self.output_dir}: {exc}") from exc

            self._fh = fh
            self._csv = csv_out
            self._path = path
            if self.background_flush:
                self._writer = _BackgroundWriter(self._write_lines, name=f"GaitImuWriter({path.name})")

        logger.info("Recording to %s", path)
        return path

    def append(self, sample: ImuSample, flush_threshold: Optional[int] = None) -> None:
        """Buffer one sample; flush once the buffer reaches the threshold."""
        threshold = self.flush_threshold if flush_threshold is None else flush_threshold
        with self._lock:
            if self._fh is None:
                return
            self._rows.append(sample.to_row())
            if len(self._rows) < threshold:
                return
            if self._writer is not None:
                batch, self._rows = self._rows, []
                self._writer.submit(batch)
            else:
                self._flush_locked()

    def flush(self) -> None:
        """
        Write every buffered line to the file, in order.

        On failure :class:`StorageError` is raised and lines that were not
        written stay buffered for the next attempt.
        """
        with self._lock:
            if self._fh is None:
                return
            if self._writer is not None:
                error, unwritten = self._writer.drain()
                if error is not None:
                    self._rows[:0] = unwritten
                    raise StorageError(f"Failed to write {self._path}: {error}") from error
            self._flush_locked()

    def close(self) -> None:
        """Flush and release the file. Safe to call repeatedly."""
        with self._lock:
            if self._fh is None:
                self._rows.clear()
                return
            path = self._path
            try:
                self.flush()
            finally:
                if self._writer is not None:
                    self._writer.stop()
                    self._writer = None
                lost = len(self._rows)
                if lost:
                    logger.error("Closing %s with %d unwritten line(s)", path, lost)
                try:
                    self._fh.close()
                finally:
                    self._fh = None
                    self._csv = None
                    self._path = None
                    self._rows.clear()
        logger.info("Closed recording %s", path)

    def __enter__(self) -> BufferedSampleLogger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --------------------------------------------------------------- writing
    def _flush_locked(self) -> None:
        if not self._rows:
            return
        rows = self._rows
        with time_block(f"flush {len(rows)} rows"):
            try:
                self._write_lines(rows)
            except OSError as exc:
                raise StorageError(f"Failed to write {self._path}: {exc}") from exc
        self._rows = []

    def _write_lines(self, rows: List[Row]) -> None:
        fh, csv_out = self._fh, self._csv
        if fh is None or csv_out is None:
            raise StorageError("No recording file is open")
        csv_out.writerows(rows)
        fh.flush()
        if self.fsync_on_flush:
            os.fsync(fh.fileno())
