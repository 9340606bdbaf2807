"""
Telemetry projection tests — display strings handed to the render boundary.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from telemetry import (
    FreeFallTelemetry, UniformTelemetry, NO_VALUE, progress_bar_value, progress_label,
)


class TestProgress:

    def test_clamped(self):
        assert progress_bar_value(-0.5) == 0
        assert progress_bar_value(1.7) == 1000
        assert progress_bar_value(0.4567) == 457

    def test_label(self):
        assert progress_label(0.0) == "0 % of time"
        assert progress_label(0.5) == "50 % of time"
        assert progress_label(1.0) == "100 % of time"


class TestFreeFallDisplay:

    def test_downward_arrow(self):
        d = FreeFallTelemetry(1.0, 45.1, 4.9, 9.81, 2.19, 0.31).display()
        assert d["velocity"] == "↓ 9.81 m/s"
        assert d["height"] == "45.10 m"
        assert d["distance_fallen"] == "4.90 m"
        assert d["time_remaining"] == "2.19 s"

    def test_upward_arrow_shows_magnitude(self):
        d = FreeFallTelemetry(0.0, 20.0, 0.0, -10.0, 3.6, 0.0).display()
        assert d["velocity"] == "↑ 10.00 m/s"

    def test_never_sentinel_shows_dash(self):
        d = FreeFallTelemetry(0.0, 20.0, 0.0, 0.0, -1.0, 0.0).display()
        assert d["time_remaining"] == NO_VALUE

    def test_to_dict_keeps_raw_values(self):
        t = FreeFallTelemetry(0.5, 48.77, 1.23, 4.905, 2.69, 0.16)
        assert t.to_dict()["velocity"] == 4.905


class TestUniformDisplay:

    def test_direction_arrows(self):
        right = UniformTelemetry(1.0, 5.0, 5.0, 5.0, 25.0, 0.2).display()
        left = UniformTelemetry(1.0, 36.0, -4.0, -4.0, 16.0, 0.2).display()
        assert right["velocity"] == "→ 5.00 m/s"
        assert left["velocity"] == "← 4.00 m/s"
        assert left["displacement"] == "-4.00 m"
        assert right["final_position"] == "25.00 m"
