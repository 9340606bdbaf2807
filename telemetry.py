"""
Telemetry Projection — per-tick snapshots and their display strings.

The drivers build these snapshots; the render boundary (server.py, or any
other front end) only ever sees `to_dict()` / `display()` output.
"""

from dataclasses import asdict, dataclass

NO_VALUE = "—"


def fmt(value: float) -> str:
    return f"{value:.2f}"


def progress_bar_value(progress: float) -> int:
    """0..1 → 0..1000 for a progress widget, clamped."""
    return int(round(max(0.0, min(progress, 1.0)) * 1000))


def progress_label(progress: float) -> str:
    return f"{round(progress_bar_value(progress) / 10.0):d} % of time"


@dataclass(frozen=True)
class FreeFallTelemetry:
    time: float
    height: float
    distance_fallen: float
    velocity: float          # + = downward
    time_remaining: float    # NEVER (-1) when the ground is never reached
    progress: float

    def to_dict(self) -> dict:
        return asdict(self)

    def display(self) -> dict:
        arrow = "↓ " if self.velocity >= 0 else "↑ "
        remaining = NO_VALUE if self.time_remaining < 0 else f"{fmt(self.time_remaining)} s"
        return {
            "time":            f"{fmt(self.time)} s",
            "height":          f"{fmt(self.height)} m",
            "distance_fallen": f"{fmt(self.distance_fallen)} m",
            "velocity":        f"{arrow}{fmt(abs(self.velocity))} m/s",
            "time_remaining":  remaining,
            "progress":        progress_label(self.progress),
            "progress_value":  progress_bar_value(self.progress),
        }


@dataclass(frozen=True)
class UniformTelemetry:
    time: float
    position: float
    displacement: float
    velocity: float          # + = rightward
    final_position: float
    progress: float

    def to_dict(self) -> dict:
        return asdict(self)

    def display(self) -> dict:
        arrow = "→ " if self.velocity >= 0 else "← "
        return {
            "time":           f"{fmt(self.time)} s",
            "position":       f"{fmt(self.position)} m",
            "displacement":   f"{fmt(self.displacement)} m",
            "velocity":       f"{arrow}{fmt(abs(self.velocity))} m/s",
            "final_position": f"{fmt(self.final_position)} m",
            "progress":       progress_label(self.progress),
            "progress_value": progress_bar_value(self.progress),
        }
