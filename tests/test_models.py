import json
import math

import pytest

from viewport_detection.models import (
    AnalysisOptions,
    BackgroundColor,
    BoundingBox,
    PreviewConfig,
    PreviewResult,
    ViewportFrame,
)


@pytest.fixture
def frame():
    return ViewportFrame(id="abc", bounding_box=BoundingBox(10, 20, 100, 50), area=5000)


def test_bounding_box_properties():
    box = BoundingBox(10, 20, 100, 50)
    assert box.right == 110
    assert box.bottom == 70
    assert box.center.as_tuple() == (60, 45)
    assert box.area == 5000
    assert box.aspect_ratio == 2


@pytest.mark.parametrize(
    "values", [(0, 0, -1, 10), (0, 0, 10, -1), (math.nan, 0, 1, 1), (0, math.inf, 1, 1)]
)
def test_bounding_box_rejects_invalid(values):
    with pytest.raises(ValueError):
        BoundingBox(*values)


def test_with_rotation_returns_new_frame(frame):
    rotated = frame.with_rotation(12.5)

    assert rotated is not frame
    assert rotated.rotation == 12.5
    assert frame.rotation == 0
    assert rotated.id == frame.id
    assert rotated.bounding_box == frame.bounding_box
    assert rotated.area == frame.area


@pytest.mark.parametrize("degrees, expected", [(180, 180), (-180, 180), (270, -90), (-370, -10)])
def test_with_rotation_normalizes(frame, degrees, expected):
    assert frame.with_rotation(degrees).rotation == pytest.approx(expected)


def test_frame_is_immutable(frame):
    with pytest.raises(AttributeError):
        frame.rotation = 10


def test_frame_json(frame):
    rotated = frame.with_rotation(-7)
    assert ViewportFrame.from_json(rotated.to_json()) == rotated


def test_frame_from_dict_defaults_rotation():
    data = {"id": "x", "bounding_box": {"x": 1, "y": 2, "width": 3, "height": 4}, "area": 12}
    assert ViewportFrame.from_dict(data).rotation == 0


def test_default_options():
    options = AnalysisOptions()
    assert options.background_color is BackgroundColor.WHITE
    assert options.min_area_threshold == 2500
    assert options.min_dimension_threshold == 30
    assert options.tolerance == 30


def test_options_from_dict_keeps_defaults():
    options = AnalysisOptions.from_dict({"background_color": "black", "min_area_threshold": 900})
    assert options.background_color is BackgroundColor.BLACK
    assert options.min_area_threshold == 900
    assert options.min_dimension_threshold == 30


def test_options_json_and_file(tmp_path):
    options = AnalysisOptions(background_color=BackgroundColor.AUTO, tolerance=12)
    assert AnalysisOptions.from_json(options.to_json()) == options

    path = tmp_path / "options.json"
    path.write_text(options.to_json())
    assert AnalysisOptions.from_file(path) == options

    assert json.loads(AnalysisOptions.default_json())["background_color"] == "white"


@pytest.mark.parametrize(
    "data",
    [
        {"background_color": "grey"},
        {"tolerance": 300},
        {"min_area_threshold": -1},
        {"min_dimension_threshold": -5},
        {"min_area_threshold": "abc"},
        {"tolerance": None},
        {"min_dimension_threshold": True},
    ],
)
def test_options_validation(data):
    with pytest.raises(ValueError):
        AnalysisOptions.from_dict(data)


def test_preview_config_validation():
    PreviewConfig().validate()
    with pytest.raises(ValueError):
        PreviewConfig(max_dimension=0).validate()
    with pytest.raises(ValueError):
        PreviewConfig(image_format=".bmp").validate()


def test_preview_result_to_dict(frame):
    ok = PreviewResult(success=True, frame=frame, data="data:image/png;base64,AA", width=200, height=100)
    failed = PreviewResult(success=False, frame=frame, error="boom")

    assert ok.to_dict()["base64"] == "data:image/png;base64,AA"
    assert failed.to_dict() == {"success": False, "frame": frame.to_dict(), "error": "boom"}


@pytest.mark.parametrize("degrees", [math.nan, math.inf, -math.inf])
def test_with_rotation_rejects_non_finite(frame, degrees):
    with pytest.raises(ValueError):
        frame.with_rotation(degrees)


def test_frame_from_dict_rejects_non_finite_rotation():
    data = {
        "id": "x",
        "bounding_box": {"x": 1, "y": 2, "width": 3, "height": 4},
        "area": 12,
        "rotation": math.nan,
    }
    with pytest.raises(ValueError):
        ViewportFrame.from_dict(data)
