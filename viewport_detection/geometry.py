"""Rotation geometry for viewport frames.

All angles are in degrees. Coordinates are image coordinates with y growing
downward, so a positive angle turns clockwise on screen.
"""

from __future__ import annotations

import math
from typing import Iterable

from .models import BoundingBox, Point, normalize_angle

EXPAND_PADDING_MIN = 0.2
EXPAND_PADDING_MAX = 0.4


def rotate_vector(vector: Point, degrees: float) -> Point:
    """Rotate a vector about the origin."""
    theta = math.radians(degrees)
    cos, sin = math.cos(theta), math.sin(theta)
    return Point(vector.x * cos - vector.y * sin, vector.x * sin + vector.y * cos)


def rotate_point(point: Point, center: Point, degrees: float) -> Point:
    """Rotate a point about a center."""
    offset = rotate_vector(Point(point.x - center.x, point.y - center.y), degrees)
    return Point(center.x + offset.x, center.y + offset.y)


def rotated_corners(box: BoundingBox, degrees: float) -> list[Point]:
    """Return the box corners rotated about the box center.

    Returns:
        Corners in order top-left, top-right, bottom-right, bottom-left
    """
    center = box.center
    corners = [
        Point(box.x, box.y),
        Point(box.right, box.y),
        Point(box.right, box.bottom),
        Point(box.x, box.bottom),
    ]
    return [rotate_point(corner, center, degrees) for corner in corners]


def axis_aligned_bounds(points: Iterable[Point]) -> BoundingBox:
    """Return the smallest axis-aligned box containing all points."""
    points = list(points)
    min_x = min(p.x for p in points)
    max_x = max(p.x for p in points)
    min_y = min(p.y for p in points)
    max_y = max(p.y for p in points)
    return BoundingBox(min_x, min_y, max_x - min_x, max_y - min_y)


def _padding_factor(degrees: float) -> float:
    """Padding fraction growing from 0.2 at no skew to 0.4 at 90 degrees."""
    skew = abs(normalize_angle(degrees))
    if skew > 90:
        skew = 180 - skew
    return EXPAND_PADDING_MIN + (EXPAND_PADDING_MAX - EXPAND_PADDING_MIN) * skew / 90


def expanded_region(
    box: BoundingBox, degrees: float, img_w: int, img_h: int
) -> BoundingBox:
    """Return a padded source region covering the rotated frame.

    The bounds of the rotated corners are clamped to the image, padded by
    ``max(width, height) * factor`` and clamped again, so the result always
    lies within [0, img_w] x [0, img_h].
    """
    bounds = axis_aligned_bounds(rotated_corners(box, degrees))

    min_x = max(0.0, bounds.x)
    min_y = max(0.0, bounds.y)
    max_x = min(float(img_w), bounds.right)
    max_y = min(float(img_h), bounds.bottom)

    padding = max(box.width, box.height) * _padding_factor(degrees)

    x0 = round(min(max(0.0, min_x - padding), img_w))
    y0 = round(min(max(0.0, min_y - padding), img_h))
    x1 = round(max(min(float(img_w), max_x + padding), 0.0))
    y1 = round(max(min(float(img_h), max_y + padding), 0.0))

    return BoundingBox(x0, y0, max(0, x1 - x0), max(0, y1 - y0))


def rotated_canvas_size(width: int, height: int, degrees: float) -> tuple[int, int]:
    """Return the canvas (width, height) needed to hold a rotated image."""
    theta = math.radians(degrees)
    cos, sin = abs(math.cos(theta)), abs(math.sin(theta))
    # Trim float noise so 0/90/180 degrees give exact sizes
    new_w = math.ceil(width * cos + height * sin - 1e-6)
    new_h = math.ceil(width * sin + height * cos - 1e-6)
    return max(1, new_w), max(1, new_h)
