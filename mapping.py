"""
Coordinate Mapper — metres → screen pixels.

Two independent 1-D affine maps, built once per run from the viewport size
at start time and frozen until the run ends (a resize does not reflow them).
No rendering code here, so the maths is testable without a window.
"""

import math
from dataclasses import dataclass

import numpy as np

# ── Layout constants (px) ─────────────────────────────────────────────────────
GROUND_MARGIN: float = 120.0      # ground line distance from the viewport bottom
TOP_MARGIN: float = 60.0          # headroom above the highest point
SIDE_MARGIN: float = 90.0         # left/right padding of the horizontal track
MIN_TRACK_WIDTH: float = 200.0    # floor for the usable track width
DEGENERATE_RANGE: float = 1e-3    # m; below this the track has no extent
SPRITE_HALF_WIDTH: float = 60.0   # half the car sprite, used to centre it
IMPACT_REST_OFFSET: float = 10.0  # sprite rests this far above the ground line


def _finite_or(value, fallback: float) -> float:
    return fallback if math.isnan(value) or math.isinf(value) else value


@dataclass(frozen=True)
class VerticalMapping:
    """Free fall: y grows downward on screen, height grows upward."""
    ground_level: float
    pixel_scale: float

    @classmethod
    def for_viewport(cls, viewport_height: float, initial_height: float) -> "VerticalMapping":
        ground_level = viewport_height - GROUND_MARGIN
        pixel_scale = (ground_level - TOP_MARGIN) / max(initial_height, 1.0)
        return cls(ground_level=ground_level, pixel_scale=pixel_scale)

    def to_screen(self, height):
        return self.ground_level - height * self.pixel_scale

    @property
    def rest_y(self) -> float:
        return self.ground_level - IMPACT_REST_OFFSET


@dataclass(frozen=True)
class HorizontalMapping:
    """Uniform motion: fit [min(x0, x_end), max(x0, x_end)] into the track."""
    base_offset: float
    pixel_scale: float
    viewport_width: float

    @classmethod
    def for_viewport(cls, viewport_width: float, x0: float, x_end: float) -> "HorizontalMapping":
        min_x = min(x0, x_end)
        max_x = max(x0, x_end)
        span = max_x - min_x
        if span < DEGENERATE_RANGE:
            return cls(base_offset=viewport_width / 2.0 - SPRITE_HALF_WIDTH,
                       pixel_scale=0.0,
                       viewport_width=viewport_width)
        available = max(viewport_width - SIDE_MARGIN * 2, MIN_TRACK_WIDTH)
        pixel_scale = available / span
        return cls(base_offset=SIDE_MARGIN - min_x * pixel_scale,
                   pixel_scale=pixel_scale,
                   viewport_width=viewport_width)

    @property
    def degenerate(self) -> bool:
        return self.pixel_scale == 0.0

    def to_screen(self, position):
        """Map x; non-finite results fall back to the viewport midpoint."""
        midpoint = self.viewport_width / 2.0
        if isinstance(position, np.ndarray):
            px = self.base_offset + position * self.pixel_scale
            return np.where(np.isfinite(px), px, midpoint)
        return _finite_or(self.base_offset + position * self.pixel_scale, midpoint)
