"""Click-based viewport frame detection and preview entry points."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

import cv2
import numpy as np

from .boundary import detect_boundary_points
from .exceptions import ImageReadError, ViewportDetectionError
from .framing import build_frame, validate_click
from .models import AnalysisOptions, AnalysisResult, PreviewConfig, PreviewResult, ViewportFrame
from .preview import render
from .sampling import BackgroundEstimator, resolve_background_intensity, to_grayscale

if TYPE_CHECKING:
    from .visualizer import DebugVisualizer

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_FORMATS = (".jpg", ".jpeg", ".png", ".tiff", ".tif")


def load_image(path: str | Path) -> np.ndarray:
    """Load and decode an image file.

    Raises:
        ImageReadError: If the file is missing, unsupported or cannot be decoded
    """
    path = Path(path)
    if path.suffix.lower() not in SUPPORTED_IMAGE_FORMATS:
        raise ImageReadError(str(path), f"unsupported format {path.suffix or '(none)'}")
    if not path.is_file():
        raise ImageReadError(str(path), "file not found")

    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageReadError(str(path))
    return img


def detect_frame(
    image: np.ndarray,
    click_x: int,
    click_y: int,
    options: AnalysisOptions | None = None,
    visualizer: DebugVisualizer | None = None,
    background_estimator: BackgroundEstimator | None = None,
) -> ViewportFrame | None:
    """Detect the photo under a click on a scanned sheet.

    Args:
        image: Decoded image (BGR, BGRA or grayscale)
        click_x, click_y: Click position in image pixels
        options: Detection settings
        visualizer: Optional debug visualizer
        background_estimator: Used when options.background_color is AUTO

    Returns:
        New ViewportFrame, or None if the detected region is too small

    Raises:
        OutOfBoundsClickError: If the click is outside the image
    """
    options = options or AnalysisOptions()
    img_h, img_w = image.shape[:2]
    validate_click(click_x, click_y, img_w, img_h)

    gray = to_grayscale(image)
    background = resolve_background_intensity(
        gray, options.background_color, background_estimator
    )
    logger.debug(
        "Boundary scan from (%s, %s) on %dx%d image, background=%d",
        click_x, click_y, img_w, img_h, background,
    )

    points = detect_boundary_points(gray, click_x, click_y, background, options.tolerance)

    if visualizer:
        visualizer.save_sampling_profile(gray, (click_x, click_y), background, options.tolerance)
        visualizer.save_boundary_points(gray, (click_x, click_y), points)

    frame = build_frame(points, click_x, click_y, options)
    if frame is None:
        return None

    logger.debug("Detected frame %s: %s", frame.id, frame.bounding_box)

    if visualizer:
        visualizer.save_frame(image, frame)

    return frame


def render_preview(
    source: np.ndarray,
    frame: ViewportFrame,
    config: PreviewConfig | None = None,
    visualizer: DebugVisualizer | None = None,
) -> PreviewResult:
    """Render a straightened preview of a frame."""
    return render(source, frame, config, visualizer)


def generate_preview(
    path: str | Path,
    frame: ViewportFrame,
    config: PreviewConfig | None = None,
) -> PreviewResult:
    """Load an image and render a frame preview; read errors become a failed result."""
    try:
        source = load_image(path)
    except ImageReadError as e:
        logger.warning("%s", e)
        return PreviewResult(success=False, frame=frame, error=e.user_message)
    return render_preview(source, frame, config)


def analyze_click(
    path: str | Path,
    click_x: int,
    click_y: int,
    options: AnalysisOptions | None = None,
    config: PreviewConfig | None = None,
) -> AnalysisResult:
    """Load an image, detect the frame under a click and render its preview.

    Detection errors (unreadable image, click outside the image) are
    reported in the result.
    """
    start = time.perf_counter()

    def elapsed_ms() -> float:
        return (time.perf_counter() - start) * 1000

    try:
        image = load_image(path)
        frame = detect_frame(image, click_x, click_y, options)
    except ViewportDetectionError as e:
        logger.warning("Click analysis of %s failed: %s", path, e)
        return AnalysisResult(success=False, analysis_time=elapsed_ms(), error=e.user_message)

    img_h, img_w = image.shape[:2]
    preview = render_preview(image, frame, config) if frame else None

    return AnalysisResult(
        success=True,
        image_width=img_w,
        image_height=img_h,
        analysis_time=elapsed_ms(),
        frame=frame,
        preview=preview,
    )
