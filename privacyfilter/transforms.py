"""
Privacy Filter Transforms - Per-Face Obscuring Operations

Each transform mutates the frame in place, inside one face region only:
- outline: yellow box border drawn inside the region
- blur: Gaussian blur
- pixelate: mosaic (shrink, then enlarge with nearest neighbor)
- occlude: solid black box
- identity: leave the face untouched

Regions are clipped to the frame first, so pixels outside the region are
never read or written. Degenerate regions become a no-op.
"""

import inspect
import logging
from typing import Callable, Dict, Tuple

import cv2
import numpy as np

from . import config
from .detectors import FaceRegion, clip_region
from .modes import Mode

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


def region_view(frame: np.ndarray, region: FaceRegion) -> np.ndarray:
    """
    Return a writable view of the frame covering exactly the region.

    Writes to the view land in the frame. The view is only valid while the
    frame is; the pipeline drops it at the end of the iteration.
    """
    return frame[region.y:region.y2, region.x:region.x2]


def identity(frame: np.ndarray, region: FaceRegion) -> np.ndarray:
    """No filtering."""
    return frame


def outline(
    frame: np.ndarray,
    region: FaceRegion,
    outline_color: Color = config.OUTLINE_COLOR,
    thickness: int = config.OUTLINE_THICKNESS
) -> np.ndarray:
    """
    Draw an unfilled box along the inside edge of the region.

    The border is `thickness` pixels wide on every side; the interior of the
    region is left as it is.
    """
    region = clip_region(region, frame.shape)
    if region is None or thickness < 1:
        return frame

    x, y, x2, y2 = region.x, region.y, region.x2 - 1, region.y2 - 1
    t = thickness - 1
    # Four filled bands so nothing is drawn outside the region
    for pt1, pt2 in (
        ((x, y), (x2, min(y + t, y2))),
        ((x, max(y2 - t, y)), (x2, y2)),
        ((x, y), (min(x + t, x2), y2)),
        ((max(x2 - t, x), y), (x2, y2)),
    ):
        cv2.rectangle(frame, pt1, pt2, outline_color, cv2.FILLED)
    return frame


def blur(
    frame: np.ndarray,
    region: FaceRegion,
    kernel_size: int = config.BLUR_KERNEL_SIZE
) -> np.ndarray:
    """
    Apply a Gaussian blur to the region.

    The kernel is made odd and shrunk to fit the region. Regions too small
    for a 3x3 kernel are left unchanged.
    """
    region = clip_region(region, frame.shape)
    if region is None:
        return frame

    # Ensure kernel_size is odd (required by OpenCV GaussianBlur)
    if kernel_size % 2 == 0:
        kernel_size += 1
    largest = min(region.width, region.height)
    if largest % 2 == 0:
        largest -= 1
    kernel_size = min(kernel_size, largest)
    if kernel_size < 3:
        logger.debug("Region %s too small to blur", region)
        return frame

    roi = region_view(frame, region)
    roi[:] = cv2.GaussianBlur(roi, (kernel_size, kernel_size), 0)
    return frame


def pixelate(
    frame: np.ndarray,
    region: FaceRegion,
    block_size: int = config.PIXEL_BLOCK_SIZE
) -> np.ndarray:
    """
    Apply a mosaic effect to the region.

    The region is shrunk to (width // block_size, height // block_size) with
    linear interpolation, then enlarged back with nearest neighbor. Nothing
    changes if block_size <= 1 or the region is smaller than one block.
    """
    if block_size <= 1:
        return frame
    region = clip_region(region, frame.shape)
    if region is None:
        return frame

    small_w = region.width // block_size
    small_h = region.height // block_size
    if small_w == 0 or small_h == 0:
        logger.debug("Region %s smaller than one %dpx block", region, block_size)
        return frame

    roi = region_view(frame, region)
    small = cv2.resize(roi, (small_w, small_h), interpolation=cv2.INTER_LINEAR)
    roi[:] = cv2.resize(small, (region.width, region.height), interpolation=cv2.INTER_NEAREST)
    return frame


def occlude(
    frame: np.ndarray,
    region: FaceRegion,
    fill_color: Color = config.OCCLUDE_COLOR
) -> np.ndarray:
    """Fill the whole region with a solid color."""
    region = clip_region(region, frame.shape)
    if region is None:
        return frame
    cv2.rectangle(frame, (region.x, region.y), (region.x2 - 1, region.y2 - 1), fill_color, cv2.FILLED)
    return frame


TRANSFORMS: Dict[Mode, Callable[..., np.ndarray]] = {
    Mode.NONE: identity,
    Mode.OUTLINE: outline,
    Mode.BLUR: blur,
    Mode.PIXELATE: pixelate,
    Mode.OCCLUDE_BLACK: occlude,
}


def transform_params(func: Callable, params: dict) -> dict:
    """Keep only the keyword arguments that func accepts."""
    accepted = inspect.signature(func).parameters
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in accepted.values()):
        return dict(params)
    return {k: v for k, v in params.items() if k in accepted}


def apply_transform(
    frame: np.ndarray,
    region: FaceRegion,
    mode: Mode,
    transforms: Dict[Mode, Callable[..., np.ndarray]] = TRANSFORMS,
    **params
) -> np.ndarray:
    """
    Apply the transform selected by mode to one region of the frame.

    Args:
        frame: BGR frame, modified in place.
        region: Face region in frame coordinates.
        mode: Selected privacy mode.
        transforms: Mode to transform table.
        **params: Transform settings (outline_color, thickness, kernel_size,
                  block_size, fill_color); each transform gets the ones
                  it accepts.

    Returns:
        numpy.ndarray: The same frame.
    """
    func = transforms[Mode.coerce(mode)]
    return func(frame, region, **transform_params(func, params))
