"""Shared fixtures: synthetic scans built with numpy and OpenCV."""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import cv2
import numpy as np
import pytest

from viewport_detection.geometry import rotated_corners
from viewport_detection.models import BoundingBox


def make_scan(width, height, boxes, background=255, foreground=40, channels=3):
    """Solid background with filled foreground rectangles (x, y, w, h)."""
    img = np.full((height, width), background, dtype=np.uint8)
    for x, y, w, h in boxes:
        img[y:y + h, x:x + w] = foreground
    if channels == 3:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return img


def make_skewed_scan(width, height, box, degrees, background=255, foreground=40):
    """Background with one filled rectangle rotated about its own center."""
    img = np.full((height, width, 3), background, dtype=np.uint8)
    corners = np.array(
        [[c.x, c.y] for c in rotated_corners(box, degrees)], dtype=np.float32
    )
    cv2.fillPoly(img, [np.round(corners).astype(np.int32)], (foreground,) * 3)
    return img


@pytest.fixture
def square_scan():
    """300x300 white scan with a 100x100 dark photo centered at (150, 150)."""
    return make_scan(300, 300, [(100, 100, 100, 100)])


@pytest.fixture
def sheet_scan():
    """White 600x400 sheet holding two photos."""
    return make_scan(600, 400, [(40, 60, 200, 140), (320, 100, 220, 260)])


@pytest.fixture
def gradient_image():
    """400x250 BGR image with distinct content in every pixel."""
    xs = np.linspace(0, 255, 400, dtype=np.uint8)
    ys = np.linspace(0, 255, 250, dtype=np.uint8)
    b = np.tile(xs, (250, 1))
    g = np.tile(ys[:, None], (1, 400))
    r = np.full((250, 400), 128, dtype=np.uint8)
    return np.dstack([b, g, r])


@pytest.fixture
def skewed_box():
    return BoundingBox(150, 100, 200, 120)
