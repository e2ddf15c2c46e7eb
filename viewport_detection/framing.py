"""Bounding box assembly and frame validation."""

from __future__ import annotations

import logging
import uuid
from typing import Mapping

from .exceptions import OutOfBoundsClickError
from .models import AnalysisOptions, BoundingBox, Direction, Point, ViewportFrame

logger = logging.getLogger(__name__)


def validate_click(click_x: float, click_y: float, img_w: int, img_h: int) -> None:
    """Raise OutOfBoundsClickError unless the click lies in [0, w) x [0, h)."""
    if not (0 <= click_x < img_w and 0 <= click_y < img_h):
        raise OutOfBoundsClickError(click_x, click_y, img_w, img_h)


def calculate_bounding_box(
    points: Mapping[Direction, Point], click_x: float, click_y: float
) -> BoundingBox:
    """Build the axis-aligned box spanned by the boundary points.

    Each side takes the extreme of its three facing directions (e.g. the
    left side uses W, NW and SW). A missing direction contributes the click
    coordinate.
    """

    def xs(*directions: Direction) -> list[float]:
        return [points[d].x if d in points else click_x for d in directions]

    def ys(*directions: Direction) -> list[float]:
        return [points[d].y if d in points else click_y for d in directions]

    min_x = min(xs(Direction.W, Direction.NW, Direction.SW))
    max_x = max(xs(Direction.E, Direction.NE, Direction.SE))
    min_y = min(ys(Direction.N, Direction.NW, Direction.NE))
    max_y = max(ys(Direction.S, Direction.SW, Direction.SE))

    return BoundingBox(min_x, min_y, max_x - min_x, max_y - min_y)


def build_frame(
    points: Mapping[Direction, Point],
    click_x: float,
    click_y: float,
    options: AnalysisOptions,
) -> ViewportFrame | None:
    """Turn boundary points into a ViewportFrame.

    Width and height are raised to the minimum dimension rather than
    rejected; only the resulting area is checked against the minimum area.

    Returns:
        New frame with rotation 0, or None if the area is below threshold
    """
    box = calculate_bounding_box(points, click_x, click_y)

    width = max(box.width, options.min_dimension_threshold)
    height = max(box.height, options.min_dimension_threshold)
    area = width * height

    if area < options.min_area_threshold:
        logger.debug(
            "Detected area %s is below minimum threshold %s", area, options.min_area_threshold
        )
        return None

    return ViewportFrame(
        id=uuid.uuid4().hex,
        bounding_box=BoundingBox(box.x, box.y, width, height),
        area=area,
    )
