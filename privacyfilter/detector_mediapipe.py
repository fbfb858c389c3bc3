"""
Privacy Filter MediaPipe Detector

Face detection backend using MediaPipe's TFLite models, as an alternative to
the Haar cascade. Runs 100% locally; the Tasks API model is downloaded once
into ~/.cache/privacyfilter.

The pipeline hands detectors a grayscale frame, so it is expanded back to
three channels before being passed to MediaPipe.
"""

import logging
import os
import urllib.request
from typing import Optional

import cv2
import numpy as np

from . import config
from .detectors import FaceDetector
from .errors import DetectorLoadError

# Try to import MediaPipe - support both legacy and new APIs
_USE_LEGACY_API = False
try:
    import mediapipe as mp
    # Check if legacy solutions API is available
    if hasattr(mp, 'solutions') and hasattr(mp.solutions, 'face_detection'):
        _USE_LEGACY_API = True
    from mediapipe.tasks import python as mp_tasks
    from mediapipe.tasks.python import vision as mp_vision
except ImportError as e:
    raise ImportError(
        "MediaPipe is required for the mediapipe detector. "
        "Install with: pip install mediapipe"
    ) from e

logger = logging.getLogger(__name__)

_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/face_detector/blaze_face_short_range/float16/1/blaze_face_short_range.tflite"


def _get_model_path() -> str:
    """Download and cache the face detection model for the Tasks API."""
    cache_dir = os.path.join(os.path.expanduser("~"), ".cache", "privacyfilter")
    os.makedirs(cache_dir, exist_ok=True)
    model_path = os.path.join(cache_dir, "blaze_face_short_range.tflite")

    if not os.path.exists(model_path):
        logger.info("Downloading face detection model to %s", model_path)
        try:
            urllib.request.urlretrieve(_MODEL_URL, model_path)
        except OSError as e:
            raise DetectorLoadError(_MODEL_URL, f"download failed: {e}") from e
    return model_path


class MediaPipeDetector(FaceDetector):
    """
    Face detector backed by MediaPipe face detection.

    Attributes:
        model_selection: 0 for short-range (within 2m), 1 for full-range (within 5m).
                         Only used by the legacy solutions API.
        min_detection_confidence: Minimum confidence threshold for a face.
    """

    name = 'mediapipe'

    def __init__(
        self,
        min_detection_confidence: float = config.MIN_DETECTION_CONFIDENCE,
        model_selection: int = config.MODEL_SELECTION,
        model_path: Optional[str] = None
    ):
        """
        Initialize the MediaPipe face detector.

        Args:
            min_detection_confidence: Minimum confidence value [0.0, 1.0].
            model_selection: 0 for short-range, 1 for full-range model.
            model_path: Path to a .tflite face detector model. Forces the
                        Tasks API when given.

        Raises:
            DetectorLoadError: If the model cannot be loaded.
        """
        self.min_detection_confidence = min_detection_confidence
        self.model_selection = model_selection
        self.model_path = model_path
        self._face_detection = None
        self._use_legacy = _USE_LEGACY_API and model_path is None

        if model_path is not None and not os.path.isfile(model_path):
            raise DetectorLoadError(model_path, "file not found")

        if self._use_legacy:
            self._init_legacy_api()
        else:
            self._init_tasks_api()

    def _init_legacy_api(self):
        """Initialize using legacy mp.solutions API."""
        self._face_detection = mp.solutions.face_detection.FaceDetection(
            model_selection=self.model_selection,
            min_detection_confidence=self.min_detection_confidence
        )

    def _init_tasks_api(self):
        """Initialize using new MediaPipe Tasks API."""
        model_path = self.model_path or _get_model_path()

        base_options = mp_tasks.BaseOptions(model_asset_path=model_path)
        options = mp_vision.FaceDetectorOptions(
            base_options=base_options,
            min_detection_confidence=self.min_detection_confidence
        )
        try:
            self._face_detection = mp_vision.FaceDetector.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise DetectorLoadError(model_path, str(e)) from e
        logger.info("Loaded MediaPipe face model from %s", model_path)

    def _detect(self, gray: np.ndarray):
        rgb_img = cv2.cvtColor(gray, cv2.COLOR_GRAY2RGB)
        if self._use_legacy:
            return self._detect_legacy(rgb_img)
        return self._detect_tasks(rgb_img)

    def _detect_legacy(self, rgb_img: np.ndarray) -> list:
        """Detect faces using legacy API."""
        results = self._face_detection.process(rgb_img)

        boxes = []
        if results.detections:
            h, w = rgb_img.shape[:2]
            for detection in results.detections:
                bbox = detection.location_data.relative_bounding_box
                boxes.append((
                    int(bbox.xmin * w),
                    int(bbox.ymin * h),
                    int(bbox.width * w),
                    int(bbox.height * h)
                ))
        return boxes

    def _detect_tasks(self, rgb_img: np.ndarray) -> list:
        """Detect faces using new Tasks API."""
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb_img))
        results = self._face_detection.detect(mp_image)

        return [
            (d.bounding_box.origin_x, d.bounding_box.origin_y,
             d.bounding_box.width, d.bounding_box.height)
            for d in results.detections
        ]

    def close(self):
        """Release MediaPipe resources."""
        if self._face_detection is not None:
            self._face_detection.close()
            self._face_detection = None
