"""
One-shot calculators — no session, no ticker.

Each entry point parses its text inputs, runs the closed-form model once and
returns a CalcResult.  Malformed input raises (errors.py); a physically
impossible request comes back as a result with kind NOT_REACHABLE or
INVALID_VELOCITY so the caller can show a distinct message.
"""

import math
from dataclasses import asdict, dataclass, field

from errors import InvalidParameterError, parse_number, parse_optional
from physics import FreeFallMotion, UniformMotion, is_never

OK               = "ok"
NOT_REACHABLE    = "not_reachable"
INVALID_VELOCITY = "invalid_velocity"


@dataclass(frozen=True)
class CalcResult:
    kind: str
    message: str
    values: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.kind == OK

    def to_dict(self) -> dict:
        return asdict(self)


def time_to_ground(height, velocity=None) -> CalcResult:
    """Time for a free-falling body to reach the ground, plus impact speed."""
    h0 = parse_number(height, "Height")
    v0 = parse_optional(velocity, "Initial velocity") or 0.0
    if h0 < 0:
        raise InvalidParameterError("Height must be a non-negative value.")

    motion = FreeFallMotion(h0, v0)
    t = motion.time_to_ground()
    if is_never(t):
        return CalcResult(NOT_REACHABLE, "The object never reaches the ground.")
    v_impact = motion.impact_velocity()
    return CalcResult(
        OK,
        f"Time to ground: {t:.2f} s\nImpact velocity: {v_impact:.2f} m/s",
        {"time": t, "impact_velocity": v_impact},
    )


def time_to_reach(start, target, velocity) -> CalcResult:
    """Time for a uniformly moving body to go from `start` to `target`."""
    x0 = parse_number(start, "Initial position")
    xf = parse_optional(target, "Final position")
    if xf is None:
        raise InvalidParameterError("Enter the final position (xf) to compute the time.")
    v = parse_optional(velocity, "Velocity")
    if v is None:
        raise InvalidParameterError("Enter a velocity to compute the time.")

    if v == 0:
        return CalcResult(
            INVALID_VELOCITY,
            "Velocity cannot be zero: an object at rest never reaches a different position.",
        )

    t = UniformMotion(x0, v).time_to_reach(xf)
    if t < 0:
        return CalcResult(
            NOT_REACHABLE,
            f"Cannot get from x0={x0:.2f} m to xf={xf:.2f} m with v={v:.2f} m/s.\n"
            "The object is moving in the opposite direction of the target.",
            {"time": t},
        )
    if math.isinf(t):
        return CalcResult(NOT_REACHABLE, "Calculation error. Check the values entered.")
    return CalcResult(
        OK,
        f"Time to go from x0={x0:.2f} m to xf={xf:.2f} m:\n{t:.2f} s",
        {"time": t},
    )


def required_velocity(start, target, duration) -> CalcResult:
    """Velocity needed to cover start → target in `duration` seconds."""
    x0 = parse_number(start, "Initial position")
    xf = parse_optional(target, "Final position")
    if xf is None:
        raise InvalidParameterError("Enter the final position (xf) to compute the velocity.")
    t = parse_optional(duration, "Duration")
    if t is None:
        raise InvalidParameterError("Enter the duration (time) to compute the velocity.")
    if t <= 0:
        raise InvalidParameterError("Duration must be greater than zero.")

    v = (xf - x0) / t
    return CalcResult(
        OK,
        f"Computed velocity:\nv = (xf - x0) / t\n"
        f"v = ({xf:.2f} - {x0:.2f}) / {t:.2f}\nv = {v:.2f} m/s",
        {"velocity": v, "velocity_text": f"{v:.2f}"},
    )
