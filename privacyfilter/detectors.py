"""
Privacy Filter Detectors - Face Detection Adapters

A detector takes a grayscale frame and returns the faces in it as
FaceRegion rectangles in frame coordinates. The default backend is an
OpenCV Haar cascade; a MediaPipe backend lives in detector_mediapipe.

Detectors load their model when constructed, so a missing or broken model
fails before the first frame is read.
"""

import logging
import os
from typing import List, NamedTuple, Optional, Tuple

import cv2
import numpy as np

from . import config
from .errors import DetectorLoadError

logger = logging.getLogger(__name__)

DETECTOR_KINDS = ('haar', 'mediapipe')


class FaceRegion(NamedTuple):
    """Axis-aligned face rectangle in frame coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        return self.x + self.width

    @property
    def y2(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height


def clip_region(region, frame_shape: Tuple[int, ...]) -> Optional[FaceRegion]:
    """
    Clip a rectangle to the frame bounds.

    Args:
        region: Any (x, y, width, height) sequence.
        frame_shape: Shape of the frame, (height, width[, channels]).

    Returns:
        FaceRegion: The clipped region, or None if nothing of it is left.
    """
    h, w = frame_shape[:2]
    x, y, bw, bh = (int(v) for v in region)
    x1 = max(0, x)
    y1 = max(0, y)
    x2 = min(w, x + bw)
    y2 = min(h, y + bh)
    if x2 <= x1 or y2 <= y1:
        return None
    return FaceRegion(x1, y1, x2 - x1, y2 - y1)


def _check_gray(gray: np.ndarray) -> None:
    if gray is None or gray.size == 0:
        raise ValueError("Cannot detect faces in an empty frame")
    if gray.ndim != 2:
        raise ValueError(f"Expected a single-channel frame, got shape {gray.shape}")


class FaceDetector:
    """
    Base class for face detectors.

    Subclasses implement _detect(gray) returning raw (x, y, w, h) boxes;
    detect() validates the input and clips the output to the frame.
    """

    name = 'base'

    def detect(self, gray: np.ndarray) -> List[FaceRegion]:
        """
        Detect faces in a grayscale frame.

        Args:
            gray: Single-channel uint8 image.

        Returns:
            list: FaceRegion per face, in detector order. May be empty.

        Raises:
            ValueError: If the frame is empty or not single-channel.
        """
        _check_gray(gray)
        regions = []
        for box in self._detect(gray):
            region = clip_region(box, gray.shape)
            if region is not None:
                regions.append(region)
        return regions

    def _detect(self, gray: np.ndarray):
        raise NotImplementedError

    def close(self):
        """Release detector resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def default_cascade_path() -> str:
    """Path to the frontal face cascade shipped with OpenCV."""
    data_dir = getattr(getattr(cv2, "data", None), "haarcascades", None)
    if not data_dir:
        data_dir = os.path.join(os.path.dirname(cv2.__file__), "data")
    return os.path.join(data_dir, config.CASCADE_NAME)


class HaarCascadeDetector(FaceDetector):
    """
    OpenCV face detector using a Haar cascade.

    Example:
        >>> with HaarCascadeDetector() as detector:
        ...     faces = detector.detect(gray)
    """

    name = 'haar'

    def __init__(
        self,
        cascade_path: Optional[str] = None,
        scale_factor: float = config.DETECT_SCALE_FACTOR,
        min_neighbors: int = config.DETECT_MIN_NEIGHBORS,
        min_size: Tuple[int, int] = config.DETECT_MIN_SIZE
    ):
        """
        Load the cascade.

        Args:
            cascade_path: Path to a cascade XML file. Defaults to OpenCV's
                          bundled frontal face cascade.
            scale_factor: Image pyramid step for detectMultiScale.
            min_neighbors: Neighbors needed to keep a candidate.
            min_size: Smallest face (width, height) to report.

        Raises:
            DetectorLoadError: If the cascade file is missing or invalid.
        """
        self.cascade_path = cascade_path or default_cascade_path()
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = tuple(min_size)

        if not os.path.isfile(self.cascade_path):
            raise DetectorLoadError(self.cascade_path, "file not found")

        try:
            self._classifier = cv2.CascadeClassifier()
            loaded = self._classifier.load(self.cascade_path)
        except (AttributeError, cv2.error) as e:
            raise DetectorLoadError(self.cascade_path, str(e)) from e
        if not loaded or self._classifier.empty():
            raise DetectorLoadError(self.cascade_path, "not a valid cascade")
        logger.info("Loaded face cascade from %s", self.cascade_path)

    def _detect(self, gray: np.ndarray):
        return self._classifier.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            flags=0,
            minSize=self.min_size
        )


def load_detector(kind: str = 'haar', **options) -> FaceDetector:
    """
    Create a detector by backend name.

    Args:
        kind: 'haar' (default) or 'mediapipe'.
        **options: Keyword arguments for the backend's constructor.

    Raises:
        ValueError: If kind is unknown.
        DetectorLoadError: If the backend's model cannot be loaded.
    """
    if kind == 'haar':
        return HaarCascadeDetector(**options)
    if kind == 'mediapipe':
        from .detector_mediapipe import MediaPipeDetector
        return MediaPipeDetector(**options)
    raise ValueError(f"Invalid detector '{kind}'. Must be one of: {DETECTOR_KINDS}")
