"""Straightened, cropped and scaled previews of viewport frames."""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING

import cv2
import numpy as np

from .exceptions import ImageEncodeError, InvalidCropError
from .geometry import rotate_vector, rotated_canvas_size
from .models import BoundingBox, Point, PreviewConfig, PreviewResult, ViewportFrame

if TYPE_CHECKING:
    from .visualizer import DebugVisualizer

logger = logging.getLogger(__name__)

MAX_PREVIEW_DIMENSION = 200
MIN_ROTATION = 1.0  # degrees; below this the frame is cropped without rotating

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


def preview_size(box: BoundingBox, max_dimension: int = MAX_PREVIEW_DIMENSION) -> tuple[int, int]:
    """Fit the box aspect ratio into a max_dimension square.

    Returns:
        (width, height), each at least 1 pixel
    """
    if box.width <= 0 or box.height <= 0:
        raise InvalidCropError(box.width, box.height)

    aspect = box.width / box.height
    if aspect > 1:
        width = max_dimension
        height = round(max_dimension / aspect)
    else:
        height = max_dimension
        width = round(max_dimension * aspect)
    return max(1, int(width)), max(1, int(height))


def crop_box(image: np.ndarray, box: BoundingBox) -> np.ndarray:
    """Crop the box, rounded to whole pixels and clamped to the image."""
    img_h, img_w = image.shape[:2]
    left = max(0, round(box.x))
    top = max(0, round(box.y))
    right = min(img_w, round(box.x) + round(box.width))
    bottom = min(img_h, round(box.y) + round(box.height))

    if right <= left or bottom <= top:
        raise InvalidCropError(right - left, bottom - top)
    return image[top:bottom, left:right]


def rotate_image(image: np.ndarray, degrees: float) -> np.ndarray:
    """Rotate the whole image about its center, growing the canvas to fit.

    Args:
        image: Input image
        degrees: Clockwise angle in image coordinates

    Returns:
        Rotated image; its size generally differs from the input's
    """
    img_h, img_w = image.shape[:2]
    canvas_w, canvas_h = rotated_canvas_size(img_w, img_h, degrees)

    # OpenCV angles are counter-clockwise
    matrix = cv2.getRotationMatrix2D((img_w / 2, img_h / 2), -degrees, 1.0)
    matrix[0, 2] += canvas_w / 2 - img_w / 2
    matrix[1, 2] += canvas_h / 2 - img_h / 2

    return cv2.warpAffine(
        image,
        matrix,
        (canvas_w, canvas_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )


def crop_centered(
    image: np.ndarray, center: Point, width: float, height: float
) -> np.ndarray:
    """Crop a width x height region around center.

    Sides that would leave the image are cut back at that side only; the
    center is never shifted.
    """
    img_h, img_w = image.shape[:2]
    left = max(0, round(center.x - width / 2))
    top = max(0, round(center.y - height / 2))
    right = min(img_w, round(center.x + width / 2))
    bottom = min(img_h, round(center.y + height / 2))

    if right <= left or bottom <= top:
        raise InvalidCropError(right - left, bottom - top)
    return image[top:bottom, left:right]


def straighten(
    image: np.ndarray,
    frame: ViewportFrame,
    visualizer: DebugVisualizer | None = None,
) -> np.ndarray:
    """Rotate the source by -rotation and crop the frame out of the new canvas.

    The frame center is carried into the rotated canvas as an offset from the
    image center, rotated by the same angle as the image.
    """
    box = frame.bounding_box
    img_h, img_w = image.shape[:2]

    rotated = rotate_image(image, -frame.rotation)
    canvas_h, canvas_w = rotated.shape[:2]

    center = box.center
    vector = Point(center.x - img_w / 2, center.y - img_h / 2)
    rotated_vector = rotate_vector(vector, -frame.rotation)
    rotated_center = Point(canvas_w / 2 + rotated_vector.x, canvas_h / 2 + rotated_vector.y)

    logger.debug(
        "Straightening %.1f deg: canvas %dx%d, frame center %s -> %s",
        frame.rotation, canvas_w, canvas_h, center.as_tuple(), rotated_center.as_tuple(),
    )

    if visualizer:
        visualizer.save_straightened(rotated, rotated_center, box.width, box.height)

    return crop_centered(rotated, rotated_center, box.width, box.height)


def encode_data_url(image: np.ndarray, image_format: str = ".png") -> str:
    """Encode an image as a base64 data URL."""
    try:
        ok, buffer = cv2.imencode(image_format, image)
    except cv2.error as e:
        raise ImageEncodeError(str(e)) from e
    if not ok:
        raise ImageEncodeError(f"imencode returned no data for {image_format}")

    encoded = base64.b64encode(buffer.tobytes()).decode("ascii")
    return f"data:{_MIME_TYPES.get(image_format, 'image/png')};base64,{encoded}"


def render(
    source: np.ndarray,
    frame: ViewportFrame,
    config: PreviewConfig | None = None,
    visualizer: DebugVisualizer | None = None,
) -> PreviewResult:
    """Render a preview of a frame.

    Frames with less than one degree of rotation are cropped directly;
    rotated frames are straightened first.

    Args:
        source: Decoded source image
        frame: Frame to preview
        config: Preview size and format
        visualizer: Optional debug visualizer

    Returns:
        PreviewResult; failures are reported in the result, not raised
    """
    config = config or PreviewConfig()

    try:
        if abs(frame.rotation) < MIN_ROTATION:
            region = crop_box(source, frame.bounding_box)
        else:
            region = straighten(source, frame, visualizer)

        width, height = preview_size(frame.bounding_box, config.max_dimension)
        scaled = cv2.resize(region, (width, height), interpolation=cv2.INTER_AREA)
        data = encode_data_url(scaled, config.image_format)
    except (InvalidCropError, ImageEncodeError) as e:
        logger.warning("Preview for frame %s failed: %s", frame.id, e)
        return PreviewResult(success=False, frame=frame, error=e.user_message)
    except cv2.error as e:
        # Pixel types warpAffine/resize reject, e.g. int32
        error = ImageEncodeError(f"{source.dtype} image: {e}")
        logger.warning("Preview for frame %s failed: %s", frame.id, error)
        return PreviewResult(success=False, frame=frame, error=error.user_message)

    if visualizer:
        visualizer.save_preview(scaled)

    return PreviewResult(
        success=True, frame=frame, data=data, width=width, height=height, image=scaled
    )
