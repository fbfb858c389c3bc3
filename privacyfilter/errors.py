"""
Exceptions raised by the privacy filter.

Startup failures carry the resource that could not be opened so the CLI can
report it and exit with a code specific to that resource.
"""


class PrivacyFilterError(Exception):
    """Base class for all privacy filter errors."""


class DetectorLoadError(PrivacyFilterError):
    """The face detector model could not be loaded."""

    def __init__(self, resource, reason: str = "could not be loaded"):
        self.resource = resource
        super().__init__(f"Error loading face detector '{resource}': {reason}")


class CaptureOpenError(PrivacyFilterError):
    """The capture device or stream could not be opened."""

    def __init__(self, source, reason: str = "could not be opened"):
        self.source = source
        super().__init__(f"Error opening video stream '{source}': {reason}")
