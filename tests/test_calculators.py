"""
One-shot calculator tests — results, NoSolution kinds, and input errors.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import calculators
from calculators import OK, NOT_REACHABLE, INVALID_VELOCITY
from errors import (
    InputFormatError, InvalidParameterError, SimulatorError,
    parse_extent, parse_number, parse_optional,
)


class TestParsing:

    def test_accepts_text_and_numbers(self):
        assert parse_number(" 12.5 ", "x") == 12.5
        assert parse_number(3, "x") == 3.0

    def test_format_error_names_field(self):
        with pytest.raises(InputFormatError) as info:
            parse_number("12,5m", "Height")
        assert info.value.field == "Height"
        assert isinstance(info.value, ValueError)
        assert isinstance(info.value, SimulatorError)

    @pytest.mark.parametrize("text", ["nan", "inf", "-inf"])
    def test_non_finite_rejected(self, text):
        with pytest.raises(InvalidParameterError):
            parse_number(text, "x")

    def test_optional_blank(self):
        assert parse_optional("  ", "x") is None
        assert parse_optional(None, "x") is None
        assert parse_optional("0", "x") == 0.0

    @pytest.mark.parametrize("text", ["", None, "0", "-20", "inf", "nan"])
    def test_extent_falls_back_to_default(self, text):
        assert parse_extent(text, "Viewport width", 600.0) == 600.0

    def test_extent_parses_text(self):
        assert parse_extent(" 800 ", "Viewport width", 600.0) == 800.0

    def test_extent_rejects_non_numeric_text(self):
        with pytest.raises(InputFormatError):
            parse_extent("abc", "Viewport width", 600.0)


class TestTimeToGround:

    def test_drop_from_50m(self):
        result = calculators.time_to_ground("50", "0")
        assert result.ok
        assert result.values["time"] == pytest.approx(3.1928, abs=1e-4)
        assert result.values["impact_velocity"] == pytest.approx(31.3209, abs=1e-4)
        assert "3.19 s" in result.message
        assert "31.32 m/s" in result.message

    def test_velocity_optional(self):
        assert calculators.time_to_ground("50", "").values == calculators.time_to_ground("50").values

    def test_ground_level(self):
        result = calculators.time_to_ground("0", "0")
        assert result.values == {"time": 0.0, "impact_velocity": 0.0}

    def test_negative_height(self):
        with pytest.raises(InvalidParameterError):
            calculators.time_to_ground("-1", "0")

    def test_bad_text(self):
        with pytest.raises(InputFormatError):
            calculators.time_to_ground("high", "0")


class TestTimeToReach:

    def test_reachable(self):
        result = calculators.time_to_reach("10", "70", "15")
        assert result.kind == OK
        assert result.values["time"] == pytest.approx(4.0)
        assert "4.00 s" in result.message

    def test_moving_away_is_not_reachable(self):
        result = calculators.time_to_reach("0", "10", "-2")
        assert result.kind == NOT_REACHABLE
        assert result.values["time"] < 0
        assert "opposite direction" in result.message

    def test_zero_velocity(self):
        result = calculators.time_to_reach("0", "10", "0")
        assert result.kind == INVALID_VELOCITY
        assert not result.ok

    def test_missing_target(self):
        with pytest.raises(InvalidParameterError):
            calculators.time_to_reach("0", "", "2")

    def test_missing_velocity(self):
        with pytest.raises(InvalidParameterError):
            calculators.time_to_reach("0", "10", "  ")


class TestRequiredVelocity:

    def test_formula(self):
        result = calculators.required_velocity("10", "70", "4")
        assert result.ok
        assert result.values["velocity"] == pytest.approx(15.0)
        assert result.values["velocity_text"] == "15.00"
        assert "v = (70.00 - 10.00) / 4.00" in result.message

    def test_negative_velocity_allowed(self):
        result = calculators.required_velocity("40", "16", "6")
        assert result.values["velocity"] == pytest.approx(-4.0)

    @pytest.mark.parametrize("duration", ["0", "-2"])
    def test_non_positive_duration(self, duration):
        with pytest.raises(InvalidParameterError):
            calculators.required_velocity("0", "10", duration)

    def test_missing_duration(self):
        with pytest.raises(InvalidParameterError):
            calculators.required_velocity("0", "10", "")

    def test_to_dict(self):
        d = calculators.required_velocity("0", "10", "5").to_dict()
        assert d["kind"] == OK
        assert d["values"]["velocity"] == 2.0
