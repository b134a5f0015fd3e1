"""Capture, detect and render loop for camtop."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

import cv2
import numpy as np

from camtop.config import AppConfig
from camtop.detector import to_gray
from camtop.errors import CaptureOpenError
from camtop.metrics import SystemMetricsReader
from camtop.models import FaceBox, MetricsSnapshot
from camtop.network import StatusCell
from camtop.overlay import draw_faces, draw_text_lines, format_overlay_lines
from camtop.tint import apply_tint

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    def read(self) -> tuple[bool, np.ndarray | None]: ...

    def release(self) -> None: ...


class Detector(Protocol):
    def detect(self, gray: np.ndarray) -> list[FaceBox]: ...


class Display(Protocol):
    def show(self, title: str, frame: np.ndarray) -> None: ...

    def poll_key(self, wait_ms: int) -> int: ...

    def close(self) -> None: ...


class OpenCVCapture:
    """cv2.VideoCapture on a camera index, released at most once."""

    def __init__(self, device_index: int = 0) -> None:
        capture = cv2.VideoCapture(device_index)
        if not capture.isOpened():
            capture.release()
            raise CaptureOpenError(f"could not open video device {device_index}")
        self._capture = capture
        self._released = False
        logger.info("opened video device %d", device_index)

    def read(self) -> tuple[bool, np.ndarray | None]:
        return self._capture.read()

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._capture.release()


class OpenCVDisplay:
    """HighGUI window output."""

    def show(self, title: str, frame: np.ndarray) -> None:
        cv2.imshow(title, frame)

    def poll_key(self, wait_ms: int) -> int:
        return cv2.waitKey(wait_ms)

    def close(self) -> None:
        cv2.destroyAllWindows()


@dataclass(slots=True, frozen=True)
class LoopResult:
    """Summary of a finished loop run."""

    frames: int
    reason: str  # 'end_of_stream' or 'quit'
    detection_runs: int


class FrameLoop:
    """
    The main capture/detect/render loop.

    Single-threaded: each iteration reads a frame, detects faces on every
    ``frame_skip``-th frame, tints, overlays telemetry and shows the result.
    Faces found on one frame are not redrawn on the frames that skip detection.
    """

    def __init__(
        self,
        capture: FrameSource,
        detector: Detector,
        display: Display,
        metrics: SystemMetricsReader,
        status_cell: StatusCell,
        config: AppConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._capture = capture
        self._detector = detector
        self._display = display
        self._metrics = metrics
        self._status_cell = status_cell
        self._config = config or AppConfig()
        self._clock = clock
        self._sleep = sleep
        self._snapshot = MetricsSnapshot()

    @property
    def snapshot(self) -> MetricsSnapshot:
        """Telemetry values drawn on the most recent frame."""
        return self._snapshot

    def run(self) -> LoopResult:
        """Run until the source is exhausted or the quit key is pressed."""
        cfg = self._config
        frame_skip = cfg.detection.frame_skip
        cpu_every = frame_skip * cfg.telemetry.cpu_refresh_every

        frame_index = 0
        detection_runs = 0
        reason = "end_of_stream"
        try:
            quit_code = ord(cfg.display.quit_key)
            while True:
                ok, frame = self._capture.read()
                if not ok or frame is None or frame.size == 0:
                    logger.info("no frame from capture, stopping after %d frames", frame_index)
                    break

                if frame_index % frame_skip == 0:
                    faces = self._detector.detect(to_gray(frame))
                    draw_faces(frame, faces)
                    detection_runs += 1

                apply_tint(frame)

                if frame_index % cpu_every == 0:
                    self._snapshot = replace(self._snapshot, cpu_percent=self._metrics.read_cpu_usage())
                self._snapshot = replace(self._snapshot, ram_percent=self._metrics.read_ram_usage())

                lines = format_overlay_lines(self._snapshot, self._status_cell.read(), self._clock())
                draw_text_lines(frame, lines)

                self._display.show(cfg.display.window_title, frame)
                frame_index += 1

                key = self._display.poll_key(cfg.display.key_poll_ms)
                if key != -1 and (key & 0xFF) == quit_code:
                    logger.info("quit key pressed")
                    reason = "quit"
                    break

                self._sleep(cfg.capture.frame_delay_s)
        finally:
            self._capture.release()
            self._display.close()

        return LoopResult(frames=frame_index, reason=reason, detection_runs=detection_runs)
