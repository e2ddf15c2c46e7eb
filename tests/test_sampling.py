import numpy as np
import pytest

from viewport_detection.models import BackgroundColor
from viewport_detection.sampling import (
    resolve_background_intensity,
    sample_background_ratio,
    to_grayscale,
)


def test_full_background_window():
    gray = np.full((50, 50), 255, dtype=np.uint8)
    assert sample_background_ratio(gray, 25, 25) == 1.0


def test_full_foreground_window():
    gray = np.full((50, 50), 40, dtype=np.uint8)
    assert sample_background_ratio(gray, 25, 25) == 0.0


def test_tolerance_is_inclusive():
    gray = np.full((20, 20), 225, dtype=np.uint8)
    assert sample_background_ratio(gray, 10, 10, background_intensity=255, tolerance=30) == 1.0
    assert sample_background_ratio(gray, 10, 10, background_intensity=255, tolerance=29) == 0.0


def test_window_is_clamped_at_corner():
    # Only the 4x4 top-left block is background; a clamped window at (0, 0)
    # samples exactly that block
    gray = np.full((20, 20), 0, dtype=np.uint8)
    gray[:4, :4] = 255
    assert sample_background_ratio(gray, 0, 0) == 1.0
    assert sample_background_ratio(gray, 19, 19) == 0.0


def test_partial_window_ratio():
    gray = np.full((20, 20), 255, dtype=np.uint8)
    gray[:, 10:] = 0
    # Columns 7..13 around x=10: 7, 8, 9 are background
    assert sample_background_ratio(gray, 10, 10) == pytest.approx(3 / 7)


def test_black_background_intensity():
    gray = np.full((20, 20), 10, dtype=np.uint8)
    assert sample_background_ratio(gray, 10, 10, background_intensity=0) == 1.0


def test_to_grayscale_accepts_common_layouts():
    bgr = np.zeros((5, 6, 3), dtype=np.uint8)
    bgra = np.zeros((5, 6, 4), dtype=np.uint8)
    gray = np.zeros((5, 6), dtype=np.uint8)
    deep = np.full((5, 6), 65535, dtype=np.uint16)

    for img in (bgr, bgra, gray):
        out = to_grayscale(img)
        assert out.shape == (5, 6)
        assert out.dtype == np.uint8

    assert to_grayscale(deep).max() == 255


def test_resolve_background_intensity():
    gray = np.full((10, 10), 90, dtype=np.uint8)
    assert resolve_background_intensity(gray, BackgroundColor.WHITE) == 255
    assert resolve_background_intensity(gray, BackgroundColor.BLACK) == 0
    # AUTO without an estimator behaves like white
    assert resolve_background_intensity(gray, BackgroundColor.AUTO) == 255


def test_auto_background_uses_estimator():
    gray = np.full((10, 10), 90, dtype=np.uint8)
    estimator = lambda g: int(np.median(g))
    assert resolve_background_intensity(gray, BackgroundColor.AUTO, estimator) == 90
    assert resolve_background_intensity(gray, BackgroundColor.AUTO, lambda g: 400) == 255
    # Estimator is ignored for explicit settings
    assert resolve_background_intensity(gray, BackgroundColor.BLACK, estimator) == 0
