import pathlib
import tempfile
import unittest
from datetime import datetime
from unittest import mock

from gaitimu.core.models import ImuSample
from gaitimu.dataio.csv_logger import (
    HEADER_LINE,
    BufferedSampleLogger,
    StorageError,
)

FIXED_START = datetime(2025, 12, 4, 15, 30, 45)


def _sample(ts: int) -> ImuSample:
    return ImuSample(ts, 0.5, -1.0, 9.81, 0.0, 0.1, 2.0)


def _row(ts: int) -> str:
    return f"{ts},0.5,-1.0,9.81,0.0,0.1,2.0"


def _read_lines(path: pathlib.Path) -> list:
    return path.read_text(encoding="utf-8").splitlines()


class BufferedSampleLoggerTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.out_dir = pathlib.Path(self._tmp.name) / "recordings"

    def tearDown(self):
        self._tmp.cleanup()

    def _logger(self, **kwargs) -> BufferedSampleLogger:
        kwargs.setdefault("clock", lambda: FIXED_START)
        return BufferedSampleLogger(self.out_dir, **kwargs)

    def test_rows_follow_header_order(self):
        log = self._logger()
        path = log.start_new_file()
        log.append(_sample(7))
        log.close()

        self.assertEqual(HEADER_LINE, "t_ns,ax,ay,az,gx,gy,gz")
        self.assertEqual(path.read_text(encoding="utf-8"), HEADER_LINE + "\n" + _row(7) + "\n")

    def test_start_new_file_writes_header_immediately(self):
        log = self._logger()
        path = log.start_new_file()

        self.assertEqual(path.name, "imu_20251204_153045.csv")
        self.assertEqual(log.current_file(), path)
        self.assertEqual(_read_lines(path), [HEADER_LINE])
        log.close()

    def test_three_appends_then_close_produce_four_lines(self):
        log = self._logger()
        path = log.start_new_file()
        for ts in (1, 2, 3):
            log.append(_sample(ts))
        log.close()

        lines = _read_lines(path)
        self.assertEqual(len(lines), 4)
        self.assertEqual(lines[0], HEADER_LINE)
        self.assertEqual([line.split(",")[0] for line in lines[1:]], ["1", "2", "3"])

    def test_reaching_threshold_flushes_without_explicit_flush(self):
        log = self._logger(flush_threshold=3)
        path = log.start_new_file()
        log.append(_sample(1))
        log.append(_sample(2))
        self.assertEqual(_read_lines(path), [HEADER_LINE])

        log.append(_sample(3))

        self.assertEqual(len(_read_lines(path)), 4)
        self.assertEqual(log.buffered_lines, 0)
        log.close()

    def test_per_call_threshold_overrides_default(self):
        log = self._logger()
        path = log.start_new_file()
        log.append(_sample(1), flush_threshold=2)
        log.append(_sample(2), flush_threshold=2)
        self.assertEqual(len(_read_lines(path)), 3)
        log.close()

    def test_close_twice_does_not_duplicate_anything(self):
        log = self._logger()
        path = log.start_new_file()
        log.append(_sample(1))
        log.close()
        log.close()

        self.assertEqual(_read_lines(path), [HEADER_LINE, _row(1)])
        self.assertIsNone(log.current_file())

    def test_append_without_open_file_is_a_noop(self):
        log = self._logger()
        log.append(_sample(1))
        log.flush()
        self.assertEqual(log.buffered_lines, 0)
        self.assertIsNone(log.current_file())

        path = log.start_new_file()
        log.close()
        log.append(_sample(2))
        self.assertEqual(log.buffered_lines, 0)
        self.assertEqual(_read_lines(path), [HEADER_LINE])

    def test_new_file_closes_previous_and_avoids_name_collision(self):
        log = self._logger()
        first = log.start_new_file()
        log.append(_sample(1))
        second = log.start_new_file()

        self.assertNotEqual(first, second)
        self.assertEqual(second.name, "imu_20251204_153045_1.csv")
        self.assertEqual(_read_lines(first), [HEADER_LINE, _row(1)])
        self.assertEqual(log.buffered_lines, 0)
        log.close()

    def test_failed_start_leaves_logger_inactive(self):
        blocker = pathlib.Path(self._tmp.name) / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        log = BufferedSampleLogger(blocker / "nested")

        with self.assertRaises(StorageError):
            log.start_new_file()
        self.assertFalse(log.is_open)
        self.assertIsNone(log.current_file())
        log.append(_sample(1))
        self.assertEqual(log.buffered_lines, 0)

    def test_failed_flush_keeps_unwritten_lines(self):
        log = self._logger()
        path = log.start_new_file()
        log.append(_sample(1))
        log.append(_sample(2))

        with mock.patch.object(log, "_write_lines", side_effect=OSError("disk full")):
            with self.assertRaises(StorageError):
                log.flush()
        self.assertEqual(log.buffered_lines, 2)

        log.flush()
        self.assertEqual(len(_read_lines(path)), 3)
        log.close()

    def test_background_flush_preserves_order(self):
        log = self._logger(flush_threshold=2, background_flush=True)
        path = log.start_new_file()
        for ts in range(1, 6):
            log.append(_sample(ts))
        log.flush()

        lines = _read_lines(path)
        self.assertEqual([line.split(",")[0] for line in lines[1:]], ["1", "2", "3", "4", "5"])
        log.close()
        self.assertEqual(len(_read_lines(path)), 6)

    def test_background_write_error_requeues_lines(self):
        log = self._logger(flush_threshold=2, background_flush=True)
        with mock.patch.object(log, "_write_lines", side_effect=OSError("disk full")):
            path = log.start_new_file()
            for ts in range(1, 5):
                log.append(_sample(ts))
            with self.assertRaises(StorageError):
                log.flush()
        self.assertEqual(log.buffered_lines, 4)

        log.close()
        lines = _read_lines(path)
        self.assertEqual([line.split(",")[0] for line in lines[1:]], ["1", "2", "3", "4"])

    def test_context_manager_closes(self):
        with self._logger() as log:
            path = log.start_new_file()
            log.append(_sample(1))
        self.assertFalse(log.is_open)
        self.assertEqual(len(_read_lines(path)), 2)


if __name__ == "__main__":
    unittest.main()
