"""
Privacy Filter Modes - Transform Selection and Shared Mode State

The mode is chosen from a trackbar in the controls window and read by the
frame pipeline once per frame. The numbering matches the trackbar positions:

    0 = NONE            no filtering
    1 = OUTLINE         yellow box outline
    2 = BLUR            Gaussian blur
    3 = PIXELATE        mosaic
    4 = OCCLUDE_BLACK   solid black box
"""

import logging
import numbers
import threading
from enum import IntEnum
from typing import Union

logger = logging.getLogger(__name__)


class Mode(IntEnum):
    """Privacy transform applied to every detected face."""

    NONE = 0
    OUTLINE = 1
    BLUR = 2
    PIXELATE = 3
    OCCLUDE_BLACK = 4

    @classmethod
    def coerce(cls, value: Union["Mode", int]) -> "Mode":
        """
        Convert a trackbar value to a Mode.

        Integers outside the valid range are clamped to the nearest mode.

        Raises:
            TypeError: If value is not an integer.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise TypeError(f"Mode must be an integer, got {type(value).__name__}")
        lowest = min(cls)
        highest = max(cls)
        clamped = max(lowest, min(highest, int(value)))
        if clamped != value:
            logger.warning("Mode value %d out of range, clamped to %d", value, clamped)
        return cls(clamped)


class ModeState:
    """
    Thread-safe holder for the currently selected Mode.

    Written from the UI control callback and read by the frame pipeline.
    A write can land at any moment relative to a frame; the pipeline takes
    one snapshot per frame so every face in that frame gets the same mode.

    Example:
        >>> state = ModeState()
        >>> state.set(3)
        <Mode.PIXELATE: 3>
        >>> state.get()
        <Mode.PIXELATE: 3>
    """

    def __init__(self, initial: Union[Mode, int] = Mode.NONE):
        self._lock = threading.Lock()
        self._mode = Mode.coerce(initial)

    def get(self) -> Mode:
        """Return the current mode."""
        with self._lock:
            return self._mode

    def set(self, value: Union[Mode, int]) -> Mode:
        """Store a new mode (clamped to the valid range) and return it."""
        mode = Mode.coerce(value)
        with self._lock:
            self._mode = mode
        logger.debug("Mode set to %s", mode.name)
        return mode

    def on_trackbar(self, value: int) -> None:
        """Trackbar callback for cv2.createTrackbar."""
        self.set(value)

    def __repr__(self):
        return f"ModeState({self.get().name})"
