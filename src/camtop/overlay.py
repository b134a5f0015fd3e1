"""Text and bounding-box overlays drawn onto frames."""

from collections.abc import Iterable, Sequence
from datetime import datetime

import cv2
import numpy as np

from camtop.models import FaceBox, MetricsSnapshot, NetworkStatus

WHITE = (255, 255, 255)
FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.5
THICKNESS = 2
TEXT_X = 10
TEXT_Y0 = 20
LINE_STEP = 20


def format_overlay_lines(
    snapshot: MetricsSnapshot,
    status: NetworkStatus,
    now: datetime,
) -> list[str]:
    """Format the telemetry overlay texts."""
    return [
        f"CPU: {snapshot.cpu_percent:.2f}%",
        f"RAM: {snapshot.ram_percent:.2f}%",
        f"Network: {status.value}",
        f"Time: {now:%Y-%m-%d %H:%M:%S}",
    ]


def draw_faces(frame: np.ndarray, boxes: Iterable[FaceBox]) -> None:
    for box in boxes:
        cv2.rectangle(frame, box.top_left, box.bottom_right, WHITE, THICKNESS)


def draw_text_lines(frame: np.ndarray, lines: Sequence[str]) -> None:
    for i, text in enumerate(lines):
        origin = (TEXT_X, TEXT_Y0 + i * LINE_STEP)
        cv2.putText(frame, text, origin, FONT, FONT_SCALE, WHITE, THICKNESS)
