"""Debug visualization utilities for viewport detection."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import cv2
import numpy as np

from .boundary import BACKGROUND_RATIO_THRESHOLD, walk_direction
from .geometry import expanded_region, rotated_corners
from .models import Direction

if TYPE_CHECKING:
    from .models import Point, ViewportFrame


def _to_bgr(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    return img.copy()


def _line_width(img: np.ndarray) -> int:
    return max(1, int(min(img.shape[:2]) / 300))


class DebugVisualizer:
    """Saves debug images at each step of detection and rendering."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)
        if self.output_dir.exists():
            # Backup existing debug dir before cleaning
            backup_dir = self.output_dir.with_suffix(".bak")
            if backup_dir.exists():
                import shutil

                shutil.rmtree(backup_dir)
            self.output_dir.rename(backup_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.step = 0

    def _save(self, name: str, img: np.ndarray):
        self.step += 1
        filename = f"{self.step:02d}_{name}.png"
        cv2.imwrite(str(self.output_dir / filename), img)

    def save_sampling_profile(
        self,
        gray: np.ndarray,
        click: tuple[int, int],
        background_intensity: int,
        tolerance: int,
    ):
        """Plot background ratio against distance for every scan direction."""
        import matplotlib.pyplot as plt
        import pandas as pd

        rows = []
        for direction in Direction:
            for step, (_, _, ratio) in enumerate(
                walk_direction(gray, int(click[0]), int(click[1]), direction,
                               background_intensity, tolerance),
                start=1,
            ):
                rows.append({"direction": direction.name, "step": step, "ratio": ratio})
        df = pd.DataFrame(rows, columns=["direction", "step", "ratio"])

        fig, ax = plt.subplots(figsize=(10, 4))
        for name, group in df.groupby("direction", sort=False):
            ax.plot(group["step"], group["ratio"], label=name)
        ax.axhline(
            y=BACKGROUND_RATIO_THRESHOLD, color="red", linestyle="--",
            label=f"threshold={BACKGROUND_RATIO_THRESHOLD}",
        )
        ax.set_xlabel("Step")
        ax.set_ylabel("Background ratio")
        ax.set_ylim(0, 1.05)
        ax.set_title(f"Background sampling (background={background_intensity}, tol={tolerance})")
        ax.legend(ncol=3, fontsize="small")

        fig.tight_layout()
        self.step += 1
        fig.savefig(self.output_dir / f"{self.step:02d}_sampling_profile.png", dpi=100)
        plt.close(fig)

    def save_boundary_points(
        self,
        gray: np.ndarray,
        click: tuple[int, int],
        points: dict[Direction, Point],
    ):
        """Save image with the click, the scan rays and the boundary hits."""
        vis = _to_bgr(gray)
        thickness = _line_width(vis)
        origin = (int(click[0]), int(click[1]))

        for direction, point in points.items():
            end = (int(point.x), int(point.y))
            color = (255, 128, 0) if direction.is_diagonal else (0, 200, 255)
            cv2.line(vis, origin, end, color, thickness)
            cv2.circle(vis, end, thickness * 4, (0, 0, 255), -1)
            cv2.putText(vis, direction.name, end, cv2.FONT_HERSHEY_SIMPLEX,
                        0.4 * thickness, (0, 0, 255), thickness)

        cv2.drawMarker(vis, origin, (0, 255, 0), cv2.MARKER_CROSS, thickness * 12, thickness * 2)
        self._save("boundary_points", vis)

    def save_frame(self, img: np.ndarray, frame: ViewportFrame):
        """Save image with the detected box, its rotated outline and expanded region."""
        vis = _to_bgr(img)
        thickness = _line_width(vis)
        box = frame.bounding_box
        img_h, img_w = vis.shape[:2]

        cv2.rectangle(
            vis,
            (int(round(box.x)), int(round(box.y))),
            (int(round(box.right)), int(round(box.bottom))),
            (0, 255, 0),
            thickness,
        )

        if frame.rotation:
            corners = np.array(
                [[c.x, c.y] for c in rotated_corners(box, frame.rotation)], dtype=np.int32
            )
            cv2.polylines(vis, [corners], True, (0, 0, 255), thickness)

            region = expanded_region(box, frame.rotation, img_w, img_h)
            cv2.rectangle(
                vis,
                (int(region.x), int(region.y)),
                (int(region.right), int(region.bottom)),
                (255, 0, 255),
                max(1, thickness // 2),
            )

        self._save("frame", vis)

    def save_straightened(
        self, canvas: np.ndarray, center: Point, width: float, height: float
    ):
        """Save the rotated canvas with the crop rectangle around the carried center."""
        vis = _to_bgr(canvas)
        thickness = _line_width(vis)
        cv2.rectangle(
            vis,
            (int(round(center.x - width / 2)), int(round(center.y - height / 2))),
            (int(round(center.x + width / 2)), int(round(center.y + height / 2))),
            (0, 255, 0),
            thickness,
        )
        cv2.drawMarker(vis, (int(center.x), int(center.y)), (0, 0, 255),
                       cv2.MARKER_CROSS, thickness * 12, thickness * 2)
        self._save("straightened_canvas", vis)

    def save_preview(self, preview: np.ndarray):
        """Save the final scaled preview."""
        self._save("preview", preview)
