"""Data input/output helpers (CSV recordings, file paths and export).

Utility modules here keep disk-level concerns isolated from the rest of the
application:
- :mod:`csv_logger` buffers the sample stream and writes it in batches.
- :mod:`file_paths` names recordings ``imu_<YYYYMMDD>_<HHMMSS>.csv``.
- :mod:`export` copies a flushed recording to an export directory.
- :mod:`log_loader` parses recordings for offline review.
"""

from .csv_logger import BufferedSampleLogger, StorageError
from .export import ExportError, export_recording

__all__ = ["BufferedSampleLogger", "StorageError", "ExportError", "export_recording"]
