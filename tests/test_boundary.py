import numpy as np
import pytest

from viewport_detection.boundary import (
    detect_boundary_points,
    image_edge,
    traverse_direction,
)
from viewport_detection.exceptions import OutOfBoundsClickError
from viewport_detection.models import Direction, Point
from viewport_detection.sampling import to_grayscale


def test_direction_set():
    vectors = {d.value for d in Direction}
    assert len(vectors) == 8
    assert (0, 0) not in vectors
    assert all(dx in (-1, 0, 1) and dy in (-1, 0, 1) for dx, dy in vectors)


def test_square_boundary_points(square_scan):
    gray = to_grayscale(square_scan)
    points = detect_boundary_points(gray, 150, 150, 255)

    assert points[Direction.N] == Point(150, 98)
    assert points[Direction.S] == Point(150, 202)
    assert points[Direction.W] == Point(98, 150)
    assert points[Direction.E] == Point(202, 150)
    assert points[Direction.NW] == Point(98, 98)
    assert points[Direction.SE] == Point(200, 200)


@pytest.mark.parametrize("click", [(150, 150), (0, 0), (299, 299), (0, 299), (120, 5)])
def test_always_eight_points_inside_image(square_scan, click):
    gray = to_grayscale(square_scan)
    points = detect_boundary_points(gray, *click, 255)

    assert set(points) == set(Direction)
    for point in points.values():
        assert 0 <= point.x < 300
        assert 0 <= point.y < 300


def test_falls_back_to_image_edges_without_background():
    gray = np.full((80, 120), 30, dtype=np.uint8)
    points = detect_boundary_points(gray, 50, 40, 255)

    assert points[Direction.N] == Point(50, 0)
    assert points[Direction.S] == Point(50, 79)
    assert points[Direction.W] == Point(0, 40)
    assert points[Direction.E] == Point(119, 40)
    assert points[Direction.NW] == Point(0, 0)
    assert points[Direction.NE] == Point(119, 0)
    assert points[Direction.SW] == Point(0, 79)
    assert points[Direction.SE] == Point(119, 79)


def test_traverse_returns_none_when_leaving_image():
    gray = np.full((40, 40), 30, dtype=np.uint8)
    assert traverse_direction(gray, 20, 20, Direction.E, 255) is None


def test_click_on_background_stops_after_first_step():
    gray = np.full((40, 40), 255, dtype=np.uint8)
    assert traverse_direction(gray, 20, 20, Direction.N, 255) == Point(20, 18)


def test_image_edge_for_axis_and_diagonal():
    assert image_edge(100, 60, 30, 20, Direction.W) == Point(0, 20)
    assert image_edge(100, 60, 30, 20, Direction.S) == Point(30, 59)
    assert image_edge(100, 60, 30, 20, Direction.SW) == Point(0, 59)
    assert image_edge(100, 60, 30, 20, Direction.NE) == Point(99, 0)


@pytest.mark.parametrize("click", [(-1, 10), (10, -1), (300, 10), (10, 300)])
def test_out_of_bounds_click(square_scan, click):
    gray = to_grayscale(square_scan)
    with pytest.raises(OutOfBoundsClickError):
        detect_boundary_points(gray, *click, 255)


def test_deterministic(sheet_scan):
    gray = to_grayscale(sheet_scan)
    assert detect_boundary_points(gray, 140, 130, 255) == detect_boundary_points(
        gray, 140, 130, 255
    )
