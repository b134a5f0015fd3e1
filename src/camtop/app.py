"""camtop - webcam face detection with a live telemetry overlay."""

import sys

from camtop.config import AppConfig, load_config
from camtop.detector import FaceDetector
from camtop.errors import CaptureOpenError, ConfigError, DetectorLoadError
from camtop.logging_setup import configure_logging, install_crash_hooks
from camtop.loop import FrameLoop, LoopResult, OpenCVCapture, OpenCVDisplay
from camtop.metrics import SystemMetricsReader
from camtop.network import NetworkMonitor, StatusCell, build_probe


def run(config: AppConfig) -> LoopResult:
    """
    Load the detector, open the camera and run the loop to completion.

    Raises:
        DetectorLoadError: The cascade could not be loaded.
        CaptureOpenError: The camera could not be opened.
    """
    det = config.detection
    detector = FaceDetector(
        det.cascade_path,
        scale_factor=det.scale_factor,
        min_neighbors=det.min_neighbors,
        min_size=(det.min_size, det.min_size),
    )
    capture = OpenCVCapture(config.capture.device_index)

    cell = StatusCell()
    monitor = NetworkMonitor(cell, build_probe(config.network), interval=config.network.interval_s)
    monitor.start()
    try:
        loop = FrameLoop(
            capture,
            detector,
            OpenCVDisplay(),
            SystemMetricsReader(),
            cell,
            config,
        )
        return loop.run()
    finally:
        monitor.stop(timeout=config.network.timeout_s * config.network.count + 1.0)


def main() -> int:
    """Entry point for camtop."""
    try:
        config = load_config()
    except ConfigError as exc:
        configure_logging().error("%s", exc)
        return 1

    logger = configure_logging(config.logging.level, config.logging.json)
    install_crash_hooks()

    try:
        result = run(config)
    except (DetectorLoadError, CaptureOpenError) as exc:
        logger.error("startup failed: %s", exc)
        return 1

    logger.info("stopped (%s) after %d frames", result.reason, result.frames)
    return 0


if __name__ == "__main__":
    sys.exit(main())
