"""Haar cascade face detector adapter."""

import logging
from pathlib import Path

import cv2
import numpy as np

from camtop.errors import DetectorLoadError
from camtop.models import FaceBox

logger = logging.getLogger(__name__)

CASCADE_FILE = "haarcascade_frontalface_default.xml"
SYSTEM_CASCADE_DIR = Path("/usr/share/opencv4/haarcascades")


def default_cascade_path() -> Path:
    """Locate the frontal-face cascade shipped with OpenCV."""
    bundled = Path(cv2.data.haarcascades) / CASCADE_FILE
    if bundled.exists():
        return bundled
    return SYSTEM_CASCADE_DIR / CASCADE_FILE


def to_gray(frame: np.ndarray) -> np.ndarray:
    """Convert a BGR frame to grayscale for detection."""
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


class FaceDetector:
    """Wraps cv2.CascadeClassifier with fixed detection parameters."""

    def __init__(
        self,
        cascade_path: Path | str | None = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 4,
        min_size: tuple[int, int] = (30, 30),
    ) -> None:
        """
        Load the cascade.

        Raises:
            DetectorLoadError: The cascade file is missing or not a valid model.
        """
        path = Path(cascade_path) if cascade_path else default_cascade_path()
        if not path.is_file():
            raise DetectorLoadError(f"cascade file not found: {path}")

        try:
            classifier = cv2.CascadeClassifier(str(path))
        except cv2.error as exc:
            raise DetectorLoadError(f"could not load cascade {path}: {exc}") from exc
        if classifier.empty():
            raise DetectorLoadError(f"could not load cascade: {path}")

        self._classifier = classifier
        self.path = path
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size
        logger.info("loaded face cascade %s", path)

    def detect(self, gray: np.ndarray) -> list[FaceBox]:
        """Detect faces in a grayscale image."""
        rects = self._classifier.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size,
        )
        return [FaceBox(int(x), int(y), int(w), int(h)) for (x, y, w, h) in rects]
