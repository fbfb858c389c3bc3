"""
Privacy Filter - Live Face Anonymization

Detects faces in a live camera feed and obscures each one with the mode
picked on a trackbar: outline, blur, pixelation or a black box.

Example:
    >>> from privacyfilter import run_webcam, Mode
    >>> run_webcam(camera_id=0, initial_mode=Mode.PIXELATE)
"""

__version__ = "0.1.0"
__author__ = "Privacy Filter Contributors"

from .errors import PrivacyFilterError, DetectorLoadError, CaptureOpenError
from .modes import Mode, ModeState
from .detectors import FaceRegion, HaarCascadeDetector, load_detector
from .transforms import apply_transform, TRANSFORMS
from .pipeline import FramePipeline, PipelineState
from .video import run_webcam, process_frame, open_capture, WindowSink

__all__ = [
    "Mode",
    "ModeState",
    "FaceRegion",
    "HaarCascadeDetector",
    "load_detector",
    "apply_transform",
    "TRANSFORMS",
    "FramePipeline",
    "PipelineState",
    "run_webcam",
    "process_frame",
    "open_capture",
    "WindowSink",
    "PrivacyFilterError",
    "DetectorLoadError",
    "CaptureOpenError",
    "__version__",
]
