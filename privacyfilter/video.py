"""
Privacy Filter Video Module - Live Webcam Face Anonymization

Wires the frame pipeline to an OpenCV capture device and HighGUI windows:
one window shows the filtered feed, a second one holds the mode trackbar.
"""

import logging
from typing import Optional, Union

import cv2
import numpy as np

from . import config
from .detectors import load_detector
from .errors import CaptureOpenError
from .modes import Mode, ModeState
from .pipeline import FramePipeline, mirror, to_gray
from .transforms import apply_transform

logger = logging.getLogger(__name__)


def open_capture(source: Union[int, str] = config.CAMERA_ID) -> cv2.VideoCapture:
    """
    Open a camera device or video stream.

    Args:
        source: Camera device ID or a video file / stream URL.

    Raises:
        CaptureOpenError: If the source cannot be opened.
    """
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        cap.release()
        raise CaptureOpenError(source)
    logger.info("Opened video source %s", source)
    return cap


class WindowSink:
    """
    Display for the filtered frames plus the mode trackbar.

    The trackbar callback writes straight into the shared ModeState.
    """

    def __init__(
        self,
        mode_state: ModeState,
        window_name: str = config.WINDOW_NAME,
        controls_name: str = config.CONTROLS_WINDOW_NAME,
        trackbar_name: str = config.TRACKBAR_NAME
    ):
        self.mode_state = mode_state
        self.window_name = window_name
        self.controls_name = controls_name
        self.trackbar_name = trackbar_name

        cv2.namedWindow(self.controls_name, cv2.WINDOW_AUTOSIZE)
        cv2.createTrackbar(
            self.trackbar_name,
            self.controls_name,
            int(mode_state.get()),
            int(max(Mode)),
            mode_state.on_trackbar
        )

    def show(self, frame: np.ndarray) -> None:
        cv2.imshow(self.window_name, frame)

    def poll_key(self, wait_ms: int) -> int:
        """Wait up to wait_ms for a key press; -1 if none."""
        key = cv2.waitKey(wait_ms)
        if key == -1:
            return -1
        return key & 0xFF

    def close(self) -> None:
        cv2.destroyAllWindows()


def run_webcam(
    camera_id: Union[int, str] = config.CAMERA_ID,
    detector: str = 'haar',
    initial_mode: Union[Mode, int] = Mode.NONE,
    wait_ms: int = config.WAIT_MS,
    detector_options: Optional[dict] = None,
    **transform_params
) -> int:
    """
    Run the live face privacy filter on a webcam feed.

    Press 'q' in the video window to quit. The detector is loaded before
    the camera is opened, so a bad model fails without touching the device.

    Args:
        camera_id: Camera device ID or video source. Default is 0.
        detector: Detector backend, 'haar' or 'mediapipe'.
        initial_mode: Mode selected at startup.
        wait_ms: Key poll timeout per frame in milliseconds.
        detector_options: Keyword arguments for the detector backend.
        **transform_params: Transform settings (kernel_size, block_size, ...).

    Returns:
        int: Number of frames processed.

    Raises:
        DetectorLoadError: If the detector model cannot be loaded.
        CaptureOpenError: If the camera cannot be opened.
    """
    mode_state = ModeState(initial_mode)

    with load_detector(detector, **(detector_options or {})) as face_detector:
        cap = open_capture(camera_id)
        try:
            sink = WindowSink(mode_state)
        except BaseException:
            cap.release()
            raise

        pipeline = FramePipeline(
            cap,
            face_detector,
            mode_state,
            sink=sink,
            wait_ms=wait_ms,
            **transform_params
        )
        return pipeline.run()


def process_frame(
    frame: np.ndarray,
    detector,
    mode: Union[Mode, int] = Mode.BLUR,
    **transform_params
) -> np.ndarray:
    """
    Process a single frame - utility function for custom video loops.

    Mirrors a copy of the frame, detects faces and applies one mode to all
    of them. The input frame is not modified.

    Args:
        frame: Input frame as numpy array (BGR format).
        detector: An initialized face detector.
        mode: Privacy mode to apply.
        **transform_params: Transform settings (kernel_size, block_size, ...).

    Returns:
        numpy.ndarray: Mirrored, anonymized frame.
    """
    mode = Mode.coerce(mode)
    result = mirror(frame)
    for region in detector.detect(to_gray(result)):
        apply_transform(result, region, mode, **transform_params)
    return result
