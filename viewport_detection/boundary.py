"""8-directional boundary scan from a click point."""

from __future__ import annotations

import logging
from typing import Iterator

import numpy as np

from .framing import validate_click
from .models import Direction, Point
from .sampling import DEFAULT_TOLERANCE, SAMPLE_RADIUS, sample_background_ratio

logger = logging.getLogger(__name__)

STEP_SIZE = 2
BACKGROUND_RATIO_THRESHOLD = 0.7


def image_edge(
    img_w: int, img_h: int, click_x: int, click_y: int, direction: Direction
) -> Point:
    """Get the image edge reached by walking from the click in a direction.

    Axis directions land on the edge at the click's orthogonal coordinate,
    diagonals land on the matching corner.
    """
    if direction.is_diagonal:
        x = 0 if direction.dx < 0 else img_w - 1
        y = 0 if direction.dy < 0 else img_h - 1
        return Point(x, y)
    if direction.dx < 0:
        return Point(0, click_y)
    if direction.dx > 0:
        return Point(img_w - 1, click_y)
    if direction.dy < 0:
        return Point(click_x, 0)
    return Point(click_x, img_h - 1)


def walk_direction(
    gray: np.ndarray,
    start_x: int,
    start_y: int,
    direction: Direction,
    background_intensity: int,
    tolerance: int = DEFAULT_TOLERANCE,
    step_size: int = STEP_SIZE,
) -> Iterator[tuple[int, int, float]]:
    """Yield (x, y, background_ratio) for each in-bounds step along a direction.

    The start point itself is not sampled. Stops when the next step leaves
    the image.
    """
    img_h, img_w = gray.shape[:2]
    x, y = start_x, start_y

    while True:
        x += direction.dx * step_size
        y += direction.dy * step_size
        if x < 0 or x >= img_w or y < 0 or y >= img_h:
            return
        ratio = sample_background_ratio(
            gray, x, y, SAMPLE_RADIUS, background_intensity, tolerance
        )
        yield x, y, ratio


def traverse_direction(
    gray: np.ndarray,
    start_x: int,
    start_y: int,
    direction: Direction,
    background_intensity: int,
    tolerance: int = DEFAULT_TOLERANCE,
    step_size: int = STEP_SIZE,
) -> Point | None:
    """Walk outward until the sampled window is mostly background.

    Returns:
        The first point whose background ratio exceeds the threshold, or
        None if the walk leaves the image first
    """
    for x, y, ratio in walk_direction(
        gray, start_x, start_y, direction, background_intensity, tolerance, step_size
    ):
        if ratio > BACKGROUND_RATIO_THRESHOLD:
            return Point(x, y)
    return None


def detect_boundary_points(
    gray: np.ndarray,
    click_x: int,
    click_y: int,
    background_intensity: int,
    tolerance: int = DEFAULT_TOLERANCE,
) -> dict[Direction, Point]:
    """Detect one boundary point per direction around a click.

    Args:
        gray: Grayscale image
        click_x, click_y: Click position, must lie inside the image
        background_intensity: Reference background value (0-255)
        tolerance: Background match tolerance

    Returns:
        Mapping with exactly one Point for each of the 8 directions

    Raises:
        OutOfBoundsClickError: If the click is outside the image
    """
    img_h, img_w = gray.shape[:2]
    validate_click(click_x, click_y, img_w, img_h)
    click_x, click_y = int(click_x), int(click_y)

    points: dict[Direction, Point] = {}
    for direction in Direction:
        point = traverse_direction(
            gray, click_x, click_y, direction, background_intensity, tolerance
        )
        if point is None:
            point = image_edge(img_w, img_h, click_x, click_y, direction)
            logger.debug("No %s boundary found, using image edge %s", direction.name, point)
        else:
            logger.debug("Found %s boundary at %s", direction.name, point)
        points[direction] = point

    return points
