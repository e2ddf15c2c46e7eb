"""Data models for viewport detection."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np


@dataclass(frozen=True)
class Point:
    """A pixel coordinate, integer or sub-pixel."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        """Return point as (x, y) tuple."""
        return (self.x, self.y)


class Direction(Enum):
    """The eight directions walked outward from a click point.

    Values are (dx, dy) unit steps in image coordinates (y grows downward).
    """

    N = (0, -1)
    S = (0, 1)
    W = (-1, 0)
    E = (1, 0)
    NW = (-1, -1)
    NE = (1, -1)
    SW = (-1, 1)
    SE = (1, 1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_diagonal(self) -> bool:
        """Check if direction moves along both axes."""
        return self.dx != 0 and self.dy != 0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in image pixel coordinates."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        values = (self.x, self.y, self.width, self.height)
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"Bounding box values must be finite, got {values}")
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Bounding box size must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        """Return center point of the box."""
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Return width / height (inf for zero height)."""
        if self.height == 0:
            return math.inf
        return self.width / self.height

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return box as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BoundingBox:
        return cls(
            float(data["x"]), float(data["y"]), float(data["width"]), float(data["height"])
        )


class BackgroundColor(Enum):
    """Scanner background behind the photos.

    WHITE: Background intensity 255 (lid closed, white backing)
    BLACK: Background intensity 0 (lid open or black backing)
    AUTO: Estimated from the image; falls back to white without an estimator
    """

    WHITE = "white"
    BLACK = "black"
    AUTO = "auto"


def _number(data: dict[str, Any], key: str, cast: type) -> float | int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{key} must be finite, got {value!r}")
    return cast(value)


@dataclass
class AnalysisOptions:
    """Settings for click-based frame detection."""

    background_color: BackgroundColor = BackgroundColor.WHITE
    min_area_threshold: float = 2500  # ~50x50 pixels
    min_dimension_threshold: float = 30
    tolerance: int = 30

    def validate(self) -> None:
        """Validate parameter ranges."""
        if not isinstance(self.background_color, BackgroundColor):
            raise ValueError(
                f"background_color must be one of {[c.value for c in BackgroundColor]}"
            )
        if self.min_area_threshold < 0:
            raise ValueError(
                f"min_area_threshold must be >= 0, got {self.min_area_threshold}"
            )
        if self.min_dimension_threshold < 0:
            raise ValueError(
                f"min_dimension_threshold must be >= 0, got {self.min_dimension_threshold}"
            )
        if not (0 <= self.tolerance <= 255):
            raise ValueError(f"tolerance must be 0-255, got {self.tolerance}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["background_color"] = self.background_color.value
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisOptions:
        """Create AnalysisOptions from dictionary, keeping defaults for missing keys."""
        options = cls()

        if "background_color" in data:
            try:
                options.background_color = BackgroundColor(data["background_color"])
            except ValueError:
                raise ValueError(
                    f"background_color must be one of {[c.value for c in BackgroundColor]}, "
                    f"got {data['background_color']!r}"
                )
        if "min_area_threshold" in data:
            options.min_area_threshold = _number(data, "min_area_threshold", float)
        if "min_dimension_threshold" in data:
            options.min_dimension_threshold = _number(data, "min_dimension_threshold", float)
        if "tolerance" in data:
            options.tolerance = _number(data, "tolerance", int)

        options.validate()
        return options

    @classmethod
    def from_json(cls, json_str: str) -> AnalysisOptions:
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def from_file(cls, path: str | Path) -> AnalysisOptions:
        """Load AnalysisOptions from JSON file."""
        with open(path) as f:
            return cls.from_json(f.read())

    @classmethod
    def default_json(cls) -> str:
        """Return default options as formatted JSON string."""
        return cls().to_json()


def normalize_angle(degrees: float) -> float:
    """Normalize angle into (-180, 180].

    Raises:
        ValueError: If the angle is NaN or infinite
    """
    if not math.isfinite(degrees):
        raise ValueError(f"rotation must be a finite angle, got {degrees}")
    normalized = math.fmod(degrees, 360.0)
    if normalized > 180:
        normalized -= 360
    elif normalized <= -180:
        normalized += 360
    return normalized


@dataclass(frozen=True)
class ViewportFrame:
    """Detected region around one photo, with the user's straightening angle.

    ``area`` always reflects the box at detection time and is not
    recomputed when the rotation changes.
    """

    id: str
    bounding_box: BoundingBox
    area: float
    rotation: float = 0.0

    def with_rotation(self, degrees: float) -> ViewportFrame:
        """Return a copy of this frame rotated to ``degrees``, normalized to (-180, 180]."""
        return replace(self, rotation=normalize_angle(float(degrees)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "bounding_box": self.bounding_box.to_dict(),
            "rotation": self.rotation,
            "area": self.area,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ViewportFrame:
        return cls(
            id=str(data["id"]),
            bounding_box=BoundingBox.from_dict(data["bounding_box"]),
            area=float(data["area"]),
            rotation=normalize_angle(float(data.get("rotation", 0.0))),
        )

    @classmethod
    def from_json(cls, json_str: str) -> ViewportFrame:
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def from_file(cls, path: str | Path) -> ViewportFrame:
        with open(path) as f:
            return cls.from_json(f.read())


@dataclass
class PreviewConfig:
    """Preview sizing and encoding settings."""

    max_dimension: int = 200
    image_format: str = ".png"

    def validate(self) -> None:
        """Validate parameter ranges."""
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.image_format not in (".png", ".jpg", ".jpeg"):
            raise ValueError(
                f"image_format must be .png, .jpg or .jpeg, got {self.image_format!r}"
            )


@dataclass
class PreviewResult:
    """Outcome of one preview render."""

    success: bool
    frame: ViewportFrame
    data: str | None = None
    """Encoded preview as a base64 data URL."""

    width: int | None = None
    height: int | None = None
    error: str | None = None
    image: np.ndarray | None = field(default=None, repr=False, compare=False)
    """Decoded preview pixels, for callers that want the array."""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "frame": self.frame.to_dict()}
        if self.success:
            data.update(base64=self.data, width=self.width, height=self.height)
        else:
            data["error"] = self.error
        return data


@dataclass
class AnalysisResult:
    """Outcome of a load + detect + preview request for one click."""

    success: bool
    image_width: int = 0
    image_height: int = 0
    analysis_time: float = 0.0
    """Elapsed time in milliseconds."""

    frame: ViewportFrame | None = None
    preview: PreviewResult | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "image_width": self.image_width,
            "image_height": self.image_height,
            "analysis_time": self.analysis_time,
            "frame": self.frame.to_dict() if self.frame else None,
            "preview": self.preview.to_dict() if self.preview else None,
            "error": self.error,
        }
