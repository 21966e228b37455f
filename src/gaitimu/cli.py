"""
Command-line front end for GaitIMU.

Examples
--------
# 10 s of simulated data at 100 Hz into ./logs
gaitimu record --source simulated --rate 100 --duration 10 --out ./logs

# Record from an MPU-6050 on I²C bus 1 until Ctrl-C, then export a copy
gaitimu record --source mpu6050 --i2c-bus 1 --export-dir ~/exports

# Summary and plot of a recording
gaitimu info logs/imu_20251204_153045.csv
gaitimu plot logs/imu_20251204_153045.csv --save plot.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import GaitImuConfig, load_config
from .core.recorder_session import RecordingSession
from .dataio.export import ExportError
from .dataio.log_loader import summarize_recording

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNAVAILABLE = 2
EXIT_SUBSCRIPTION = 3
EXIT_STORAGE = 4
EXIT_EXPORT = 5
EXIT_USAGE = 64

_START_EXIT_CODES = {
    "unavailable": EXIT_UNAVAILABLE,
    "busy": EXIT_SUBSCRIPTION,
    "subscription": EXIT_SUBSCRIPTION,
    "storage": EXIT_STORAGE,
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="gaitimu", description="Six-axis IMU recorder (CSV).")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    ap.add_argument("--config", type=str, default=None, help="YAML config file with defaults")
    sub = ap.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("record", help="Record accelerometer + gyroscope samples to CSV")
    rec.add_argument("--source", choices=["simulated", "mpu6050"], default="simulated")
    rec.add_argument("--rate", type=str, default=None, help="Sampling preset: 50 or 100 (Hz)")
    rec.add_argument("--duration", type=float, default=None, help="Duration in seconds (default: until Ctrl-C)")
    rec.add_argument("--out", type=str, default=None, help="Output folder for recordings")
    rec.add_argument("--window-size", type=int, default=None, help="Rate estimator window (samples)")
    rec.add_argument("--flush-threshold", type=int, default=None, help="Flush to file every N lines")
    rec.add_argument("--background-flush", action="store_true", default=None,
                     help="Write batches from a background thread")
    rec.add_argument("--export-dir", type=str, default=None, help="Copy the finished recording here")
    rec.add_argument("--i2c-bus", type=int, default=1, help="I2C bus id for --source mpu6050")
    rec.add_argument("--address", type=lambda s: int(s, 0), default=0x68,
                     help="MPU-6050 I2C address (default 0x68)")

    info = sub.add_parser("info", help="Print a summary of a recording")
    info.add_argument("file", type=str)

    plot = sub.add_parser("plot", help="Plot a recording with Matplotlib")
    plot.add_argument("file", type=str, nargs="?", default=None,
                      help="Recording to plot (default: newest in the output folder)")
    plot.add_argument("--save", type=str, default=None, help="Write the figure to this image file")
    return ap


def _make_hub(args: argparse.Namespace):
    if args.source == "mpu6050":
        from .sensors.mpu6050 import Mpu6050SensorHub

        return Mpu6050SensorHub(bus_id=args.i2c_bus, address=args.address)
    from .sensors.simulated import SimulatedSensorHub

    return SimulatedSensorHub()


def _format_status(session: RecordingSession) -> str:
    status = session.snapshot()
    s = status.latest_sample
    return (
        f"{status.status_text} | {status.sample_rate_hz:6.1f} Hz | n={status.sample_count} | "
        f"a=({s.ax:.3f}, {s.ay:.3f}, {s.az:.3f}) g=({s.gx:.3f}, {s.gy:.3f}, {s.gz:.3f})"
    )


def cmd_record(args: argparse.Namespace, cfg: GaitImuConfig) -> int:
    cfg = cfg.with_overrides(
        sample_rate=args.rate,
        window_size=args.window_size,
        flush_threshold=args.flush_threshold,
        background_flush=args.background_flush,
        output_dir=Path(args.out) if args.out else None,
    )
    hub = _make_hub(args)
    session = RecordingSession(hub, cfg)
    exit_code = EXIT_OK
    try:
        result = session.start()
        if not result.ok:
            print(f"ERROR: {result.detail}", file=sys.stderr)
            return _START_EXIT_CODES.get(result.failure or "", EXIT_SUBSCRIPTION)

        print(f"Recording to {result.path} (Ctrl-C to stop)")
        deadline = None if args.duration is None else time.monotonic() + args.duration
        try:
            while deadline is None or time.monotonic() < deadline:
                time.sleep(1.0 if deadline is None else max(0.0, min(1.0, deadline - time.monotonic())))
                print(_format_status(session))
                if session.last_error is not None:
                    exit_code = EXIT_STORAGE
                    break
        except KeyboardInterrupt:
            print("Interrupted")

        try:
            session.stop()
        except OSError as exc:
            print(f"ERROR: failed to finish recording: {exc}", file=sys.stderr)
            exit_code = EXIT_STORAGE

        if args.export_dir:
            try:
                target = session.export(args.export_dir)
            except ExportError as exc:
                print(f"ERROR: {exc}", file=sys.stderr)
                return EXIT_EXPORT
            print(f"Exported to {target}")
    finally:
        close = getattr(hub, "close", None)
        if close is not None:
            close()
    return exit_code


def cmd_info(args: argparse.Namespace) -> int:
    try:
        summary = summarize_recording(Path(args.file))
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_STORAGE
    print(f"File:      {summary.path}")
    print(f"Samples:   {summary.sample_count}")
    print(f"Duration:  {summary.duration_s:.3f} s")
    print(f"Mean rate: {summary.mean_rate_hz:.2f} Hz")
    return EXIT_OK


def cmd_plot(args: argparse.Namespace, cfg: GaitImuConfig) -> int:
    from .tools.plotter import find_latest_recording, plot_recording

    path: Optional[Path] = Path(args.file) if args.file else find_latest_recording(cfg.recordings_dir)
    if path is None:
        print(f"ERROR: no recordings found in {cfg.recordings_dir}", file=sys.stderr)
        return EXIT_USAGE
    try:
        saved = plot_recording(path, Path(args.save) if args.save else None)
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_STORAGE
    if saved is not None:
        print(f"Saved plot to {saved}")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg = load_config(args.config)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "record":
        return cmd_record(args, cfg)
    if args.command == "info":
        return cmd_info(args)
    return cmd_plot(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
