"""
Kinematic Models — closed-form 1-D motion laws
Free fall under constant gravity and uniform rectilinear motion.

Both models are immutable value objects: every derived quantity is a pure
function of t, so there is no integration step and no drift.
"""

import math
from dataclasses import dataclass

import numpy as np

# ──────────────────────────────────────────────
# Constants (SI units)
# ──────────────────────────────────────────────
GRAVITY: float = 9.81  # m/s^2

# Sentinels
NEVER: float = -1.0          # free fall: no real, non-negative time to ground
UNREACHABLE: float = math.inf  # uniform motion: v == 0, target never reached


def is_never(t: float) -> bool:
    return t < 0


# ──────────────────────────────────────────────
# Free fall
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class FreeFallMotion:
    """Body released from `initial_height` with `initial_velocity`.

    Sign convention: positive velocity points DOWN (it increases the fall
    rate); a negative initial velocity is an upward throw.
    """
    initial_height: float
    initial_velocity: float = 0.0
    gravity: float = GRAVITY

    def position_at(self, t):
        """Height above ground. Goes negative past the ground; callers clamp."""
        return self.initial_height - (self.initial_velocity * t + 0.5 * self.gravity * t * t)

    def velocity_at(self, t):
        return self.initial_velocity + self.gravity * t

    def distance_travelled(self, t):
        distance = self.initial_height - self.position_at(t)
        if isinstance(distance, np.ndarray):
            return np.maximum(distance, 0.0)
        return max(distance, 0.0)

    def time_to_ground(self) -> float:
        """Solve 0.5·g·t² + v0·t − h0 = 0 and return the later root.

        Returns NEVER when there is no real root or the later root is negative.
        """
        a = 0.5 * self.gravity
        b = self.initial_velocity
        c = -self.initial_height
        disc = b * b - 4 * a * c
        if disc < 0:
            return NEVER
        root = math.sqrt(disc)
        t1 = (-b + root) / (2 * a)
        t2 = (-b - root) / (2 * a)
        t = max(t1, t2)
        return t if t >= 0 else NEVER

    def impact_velocity(self) -> float:
        """|v| at the ground from v² = v0² + 2·g·h0 (independent of time_to_ground)."""
        return math.sqrt(self.initial_velocity ** 2 + 2 * self.gravity * self.initial_height)

    def trajectory(self, times) -> np.ndarray:
        """Rows of [t, height, distance fallen, velocity] for an array of times."""
        t = np.asarray(times, dtype=float)
        return np.column_stack([t, self.position_at(t), self.distance_travelled(t),
                                self.velocity_at(t)])


# ──────────────────────────────────────────────
# Uniform rectilinear motion
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class UniformMotion:
    """Constant velocity along x. Positive velocity points right."""
    initial_position: float
    velocity: float

    def position_at(self, t):
        return self.initial_position + self.velocity * t

    def displacement_at(self, t):
        return self.position_at(t) - self.initial_position

    def time_to_reach(self, target: float) -> float:
        """(target − x0) / v, or UNREACHABLE when v == 0.

        A negative result means the body is moving away from the target;
        interpreting that is left to the caller.
        """
        if self.velocity == 0:
            return UNREACHABLE
        return (target - self.initial_position) / self.velocity

    def trajectory(self, times) -> np.ndarray:
        """Rows of [t, position, displacement] for an array of times."""
        t = np.asarray(times, dtype=float)
        return np.column_stack([t, self.position_at(t), self.displacement_at(t)])
