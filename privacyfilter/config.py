"""
Default settings for the live face privacy filter.

Every value here is only a default: functions and classes take the same
settings as keyword arguments, and the CLI exposes the common ones as flags.
"""

# Capture settings
CAMERA_ID = 0

# Face detection settings (Haar cascade)
CASCADE_NAME = "haarcascade_frontalface_default.xml"
DETECT_SCALE_FACTOR = 1.1
DETECT_MIN_NEIGHBORS = 3
DETECT_MIN_SIZE = (30, 30)

# Face detection settings (MediaPipe)
MIN_DETECTION_CONFIDENCE = 0.5
MODEL_SELECTION = 1

# Transform settings (BGR colors)
OUTLINE_COLOR = (0, 255, 255)  # yellow
OUTLINE_THICKNESS = 2
BLUR_KERNEL_SIZE = 55
PIXEL_BLOCK_SIZE = 10
OCCLUDE_COLOR = (0, 0, 0)

# Display settings
WINDOW_NAME = "Face Privacy Filter"
CONTROLS_WINDOW_NAME = "Controls"
TRACKBAR_NAME = "Mode"
WAIT_MS = 30  # also paces the loop to roughly camera rate
QUIT_KEY = "q"
