"""
Tests for the motion presets — each scenario's expected physical outcome.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from controller import FreeFallController, UniformMotionController
from presets import MotionPreset, PRESETS


class TestSetupOnly:
    """run=False returns inputs only."""

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_no_trace_without_run(self, name):
        result = PRESETS[name]()
        assert result["trace"] is None
        assert result["name"] == name
        assert result["motion"] in (FreeFallController.MOTION, UniformMotionController.MOTION)

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_inputs_start_a_driver(self, name):
        result = PRESETS[name]()
        cls = FreeFallController if result["motion"] == FreeFallController.MOTION else UniformMotionController
        trace = cls.simulate(**result["inputs"])
        assert trace[-1, -1] == 1.0


class TestFreeFallPresets:

    def test_drop_50m(self):
        trace = MotionPreset.drop_50m(run=True)["trace"]
        cols = FreeFallController.trace_columns()
        assert trace[-1, cols.index("time")] == pytest.approx(3.19, abs=0.01)
        assert trace[-1, cols.index("velocity")] == pytest.approx(31.32, abs=0.01)

    def test_upward_throw_rises_then_falls(self):
        trace = MotionPreset.upward_throw(run=True)["trace"]
        cols = FreeFallController.trace_columns()
        heights = trace[:, cols.index("height")]
        assert heights.max() > 20.0
        assert trace[1, cols.index("velocity")] < 0
        assert trace[-1, cols.index("velocity")] > 0

    def test_ground_release(self):
        trace = MotionPreset.ground_release(run=True)["trace"]
        assert len(trace) == 3


class TestUniformPresets:

    def test_car_cruise_ends_at_25m(self):
        trace = MotionPreset.car_cruise(run=True)["trace"]
        cols = UniformMotionController.trace_columns()
        assert trace[-1, cols.index("position")] == pytest.approx(25.0)

    def test_car_reverse(self):
        trace = MotionPreset.car_reverse(run=True)["trace"]
        cols = UniformMotionController.trace_columns()
        assert trace[-1, cols.index("position")] == pytest.approx(16.0)
        assert trace[-1, cols.index("displacement")] == pytest.approx(-24.0)

    def test_car_to_target_derives_speed(self):
        trace = MotionPreset.car_to_target(run=True)["trace"]
        cols = UniformMotionController.trace_columns()
        assert trace[0, cols.index("velocity")] == pytest.approx(15.0)
        assert trace[-1, cols.index("position")] == pytest.approx(70.0)
