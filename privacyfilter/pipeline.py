"""
Privacy Filter Pipeline - Per-Frame Processing Loop

Each iteration of the loop:
    1. reads a frame from the capture source (an empty frame ends the stream)
    2. mirrors it horizontally
    3. converts a copy to grayscale
    4. detects faces on the grayscale copy
    5. reads the mode once
    6. applies that mode's transform to every face, in detector order
    7. shows the frame
    8. waits briefly for a key press; the quit key ends the loop

The mode may change at any time from the UI callback. Only the snapshot
taken in step 5 is used for the whole frame, so a change lands on the next
frame at the latest.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

import cv2
import numpy as np

from . import config
from .detectors import FaceRegion
from .errors import CaptureOpenError
from .modes import Mode, ModeState
from .transforms import TRANSFORMS, apply_transform

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    TERMINATED = "terminated"


def mirror(frame: np.ndarray) -> np.ndarray:
    """Flip a frame around its vertical axis."""
    return cv2.flip(frame, 1)


def to_gray(frame: np.ndarray) -> np.ndarray:
    """Grayscale copy of a BGR frame for detection."""
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


def is_empty_frame(frame) -> bool:
    return frame is None or not isinstance(frame, np.ndarray) or frame.size == 0


class FramePipeline:
    """
    Live face privacy filter loop.

    Args:
        capture: Frame source with read() -> (ok, frame), isOpened() and
                 release(), e.g. cv2.VideoCapture.
        detector: Object with detect(gray) -> list of FaceRegion.
        mode_state: Shared ModeState written by the UI control.
        sink: Display with show(frame), poll_key(wait_ms) and close().
              Optional; without it frames are processed but not shown.
        transforms: Mode to transform table.
        wait_ms: Key poll timeout per frame, also paces the loop.
        quit_key: Key that stops the loop.
        **transform_params: Settings forwarded to the transforms
                            (outline_color, thickness, kernel_size,
                            block_size, fill_color).

    Example:
        >>> pipeline = FramePipeline(cv2.VideoCapture(0), HaarCascadeDetector(),
        ...                          ModeState(Mode.BLUR), WindowSink(state))
        >>> pipeline.run()
    """

    def __init__(
        self,
        capture,
        detector,
        mode_state: ModeState,
        sink=None,
        transforms: Dict[Mode, Callable[..., np.ndarray]] = TRANSFORMS,
        wait_ms: int = config.WAIT_MS,
        quit_key: str = config.QUIT_KEY,
        **transform_params
    ):
        missing = [m.name for m in Mode if m not in transforms]
        if missing:
            raise ValueError(f"No transform for modes: {missing}")

        self.capture = capture
        self.detector = detector
        self.mode_state = mode_state
        self.sink = sink
        self.transforms = transforms
        self.wait_ms = wait_ms
        self.quit_key = quit_key
        self.transform_params = transform_params

        self.state = PipelineState.INITIALIZING
        self.frames_processed = 0
        self.last_regions: List[FaceRegion] = []
        self.last_mode: Optional[Mode] = None

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        """
        Mirror a frame, detect faces and obscure them with the current mode.

        Args:
            frame: BGR frame straight from the capture source.

        Returns:
            numpy.ndarray: The mirrored, filtered frame.
        """
        frame = mirror(frame)
        gray = to_gray(frame)
        regions = list(self.detector.detect(gray))

        # One snapshot for every face in this frame
        mode = self.mode_state.get()

        for region in regions:
            apply_transform(frame, region, mode, self.transforms, **self.transform_params)

        self.last_regions = regions
        self.last_mode = mode
        return frame

    def step(self) -> bool:
        """
        Run one iteration of the loop.

        Returns:
            bool: False once the pipeline has terminated.
        """
        ok, frame = self.capture.read()
        if not ok or is_empty_frame(frame):
            logger.info("Stream ended after %d frames", self.frames_processed)
            self.state = PipelineState.TERMINATED
            return False

        frame = self.process_frame(frame)
        self.frames_processed += 1

        if self.sink is not None:
            self.sink.show(frame)
            key = self.sink.poll_key(self.wait_ms)
            if key == ord(self.quit_key):
                logger.info("Quit key pressed")
                self.state = PipelineState.TERMINATED
                return False
        return True

    def run(self) -> int:
        """
        Process frames until the stream ends or the quit key is pressed.

        The capture source and the sink are released on every exit path.

        Returns:
            int: Number of frames processed.

        Raises:
            CaptureOpenError: If the capture source is not open.
            ValueError: If no detector was given.
        """
        try:
            if self.detector is None:
                raise ValueError("A face detector is required")
            if not self.capture.isOpened():
                raise CaptureOpenError(getattr(self.capture, 'source', 'capture'))

            self.state = PipelineState.RUNNING
            logger.info("Pipeline running")
            while self.step():
                pass
        finally:
            self.release()
        return self.frames_processed

    def release(self) -> None:
        """Release the capture source and close the display."""
        self.state = PipelineState.TERMINATED
        try:
            self.capture.release()
        finally:
            if self.sink is not None:
                self.sink.close()
