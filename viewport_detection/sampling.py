"""Pixel sampling and background intensity helpers."""

from __future__ import annotations

import logging
from typing import Callable

import cv2
import numpy as np

from .models import BackgroundColor

logger = logging.getLogger(__name__)

SAMPLE_RADIUS = 3  # 7x7 window
DEFAULT_TOLERANCE = 30

BackgroundEstimator = Callable[[np.ndarray], int]


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR, BGRA or single-channel image to 8-bit grayscale.

    Args:
        image: Input image as numpy array

    Returns:
        2-D uint8 array
    """
    if image.ndim == 2:
        gray = image
    elif image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    elif image.shape[2] == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image[:, :, 0]

    if gray.dtype != np.uint8:
        # 16-bit TIFF scans come in as uint16
        if gray.dtype == np.uint16:
            gray = (gray / 257).astype(np.uint8)
        else:
            gray = np.clip(gray, 0, 255).astype(np.uint8)
    return gray


def sample_background_ratio(
    gray: np.ndarray,
    center_x: int,
    center_y: int,
    window_radius: int = SAMPLE_RADIUS,
    background_intensity: int = 255,
    tolerance: int = DEFAULT_TOLERANCE,
) -> float:
    """Return the fraction of background pixels in a window around a point.

    The window is clamped to the image bounds, so points near an edge sample
    fewer pixels rather than reading outside the buffer.

    Args:
        gray: Grayscale image
        center_x, center_y: Window center
        window_radius: Half-size of the square window
        background_intensity: Reference background value (0-255)
        tolerance: Max absolute difference for a pixel to count as background

    Returns:
        Ratio in [0, 1]
    """
    img_h, img_w = gray.shape[:2]
    x0 = max(0, int(center_x) - window_radius)
    x1 = min(img_w - 1, int(center_x) + window_radius)
    y0 = max(0, int(center_y) - window_radius)
    y1 = min(img_h - 1, int(center_y) + window_radius)

    if x1 < x0 or y1 < y0:
        return 0.0

    window = gray[y0:y1 + 1, x0:x1 + 1].astype(np.int16)
    background = np.abs(window - int(background_intensity)) <= tolerance
    return float(np.count_nonzero(background)) / background.size


def _white_background(gray: np.ndarray) -> int:
    return 255


def _black_background(gray: np.ndarray) -> int:
    return 0


# AUTO has no estimation strategy of its own yet; it behaves like WHITE
# unless the caller passes an estimator.
_BACKGROUND_FUNCTIONS: dict[BackgroundColor, BackgroundEstimator] = {
    BackgroundColor.WHITE: _white_background,
    BackgroundColor.BLACK: _black_background,
    BackgroundColor.AUTO: _white_background,
}


def resolve_background_intensity(
    gray: np.ndarray,
    background_color: BackgroundColor,
    estimator: BackgroundEstimator | None = None,
) -> int:
    """Get the reference background intensity for a scan.

    Args:
        gray: Grayscale image
        background_color: Background setting
        estimator: Optional callable used for AUTO, returning an intensity

    Returns:
        Background intensity in 0-255
    """
    if background_color is BackgroundColor.AUTO and estimator is not None:
        value = int(np.clip(estimator(gray), 0, 255))
        logger.debug("Estimated background intensity: %d", value)
        return value
    return _BACKGROUND_FUNCTIONS[background_color](gray)
