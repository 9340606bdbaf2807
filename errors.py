"""
Error taxonomy + text parsing for the input boundary.

Every failure here is local and recoverable: the caller reports it and the
simulation state is left untouched.  "No solution" outcomes are NOT errors;
they are sentinel values returned by physics.py / calculators.py.
"""

import math
from typing import Optional


class SimulatorError(Exception):
    """Base class for every reportable input / parameter problem."""


class InputFormatError(SimulatorError, ValueError):
    """Text that could not be read as a number."""

    def __init__(self, field: str, text):
        self.field = field
        self.text = text
        super().__init__(f"{field}: '{text}' is not a valid number.")


class InvalidParameterError(SimulatorError, ValueError):
    """A well-formed number that makes no physical sense for the request."""


def _to_float(text, field: str) -> Optional[float]:
    """None for blank input; InputFormatError for anything that is not a number."""
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    raw = "" if text is None else str(text).strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise InputFormatError(field, text) from None


def parse_number(text, field: str) -> float:
    """Parse a required numeric field. Accepts str, int or float."""
    value = _to_float(text, field)
    if value is None:
        raise InvalidParameterError(f"{field} is required.")
    if not math.isfinite(value):
        raise InvalidParameterError(f"{field} must be a finite number.")
    return value


def parse_optional(text, field: str) -> Optional[float]:
    """Like parse_number, but blank / None means "not supplied"."""
    if _to_float(text, field) is None:
        return None
    return parse_number(text, field)


def parse_extent(text, field: str, default: float) -> float:
    """Parse a size in pixels. Blank, non-finite or non-positive gives `default`."""
    value = _to_float(text, field)
    if value is None or not math.isfinite(value) or value <= 0:
        return default
    return value
