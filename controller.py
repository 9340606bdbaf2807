"""
Simulation Drivers — Layer 2 (run logic)

Owns the per-run session, advances simulated time on a fixed tick, queries
the kinematic model and maps the result to screen coordinates.
Communicates with Layer 3 (server.py / any renderer) via:
  - pending_events : list of dicts to consume (telemetry, sprite, running, …)
  - status_msg     : free-text status line
  - running        : whether a run is in progress (controls enable/disable)

Layer 3 calls:
  ctrl.start(...)   — validate input, build a session, begin ticking
  ctrl.stop()       — cancel the tick source (idempotent)
  ctrl.tick()       — one simulation step (normally called by the ticker)

The state machine is idle → running → terminated; start() is re-entrant and
always cancels the previous tick source before creating a new one.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from bounce import BounceEffect
from errors import (
    InvalidParameterError, SimulatorError, parse_extent, parse_number, parse_optional,
)
from mapping import HorizontalMapping, VerticalMapping
from physics import NEVER, FreeFallMotion, UniformMotion, is_never
from telemetry import FreeFallTelemetry, UniformTelemetry
from ticker import RepeatingTask

logger = logging.getLogger(__name__)

IDLE       = "idle"
RUNNING    = "running"
TERMINATED = "terminated"


@dataclass
class SimulationSession:
    """State of one run. Created by start(), mutated only by tick()/stop()."""
    motion: object
    total_duration: float            # NEVER (-1) → the run never ends on its own
    mapping: object
    variant: str = ""
    final_position: float = 0.0      # uniform motion: x_end shown in telemetry
    ticks: int = 0
    elapsed: float = 0.0
    running: bool = False


class _MotionController:
    """Shared run plumbing. Subclasses supply _prepare/_emit_initial/tick."""

    MOTION           = ""
    TICK_INTERVAL    = 0.040
    SIM_DT           = 0.05
    DEFAULT_VIEWPORT = (600.0, 420.0)
    TELEMETRY        = None
    PATH_COLUMNS     = ()

    STATUS_READY   = "Ready to simulate."
    STATUS_RUNNING = "Simulation in progress…"

    def __init__(self, ticker_factory=RepeatingTask):
        self._ticker_factory = ticker_factory
        self._ticker = None
        self._scheduled = False

        self.session: Optional[SimulationSession] = None
        self.mode = IDLE
        self.status_msg = self.STATUS_READY
        self.last_telemetry = None

        self.pending_events: list[dict] = []

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self.session is not None and self.session.running

    def start(self, *args, **kwargs) -> SimulationSession:
        """Validate input and begin a new run.

        Raises InputFormatError / InvalidParameterError before touching any
        state, so a rejected start leaves a previous run as it was.
        """
        try:
            session = self._prepare(*args, **kwargs)
        except SimulatorError as exc:
            logger.warning("%s: start rejected: %s", self.MOTION, exc)
            raise
        self._launch(session)
        return session

    def stop(self) -> None:
        """Explicit stop. Safe to call any number of times."""
        was_running = self.running
        self._halt()
        if was_running:
            self.mode = IDLE
            self.status_msg = self.STATUS_READY
            logger.info("%s: stopped at t=%.2f s", self.MOTION, self.session.elapsed)

    def tick(self) -> None:
        raise NotImplementedError

    @classmethod
    def simulate(cls, *args, max_ticks: int = 100_000, **kwargs) -> np.ndarray:
        """Headless run to termination; returns the telemetry trace.

        Non-destructive: uses a fresh controller, needs no event loop.
        Columns follow the telemetry dataclass field order (see trace_columns()).
        """
        ctrl = cls()
        ctrl._launch(ctrl._prepare(*args, **kwargs), schedule=False)
        n = 0
        while ctrl.running and n < max_ticks:
            ctrl.tick()
            n += 1
        rows = [list(ev["data"].values()) for ev in ctrl.pending_events
                if ev["type"] == "telemetry"]
        return np.array(rows, dtype=float)

    @classmethod
    def trace_columns(cls) -> list:
        return [f.name for f in dataclasses.fields(cls.TELEMETRY)]

    @classmethod
    def preview(cls, *args, **kwargs) -> dict:
        """Closed-form path of a run, sampled every SIM_DT up to its end.

        Validates like start() but never ticks. Returns the kinematic rows
        (PATH_COLUMNS) and the mapped sprite coordinate for each row.
        """
        ctrl = cls()
        session = ctrl._prepare(*args, **kwargs)
        total = max(session.total_duration, 0.0)
        n = int(np.floor(total / cls.SIM_DT + 1e-9))
        times = np.round(np.arange(n + 1) * cls.SIM_DT, 10)
        if times[-1] < total:
            times = np.append(times, total)
        path = session.motion.trajectory(times)
        return {
            "columns": list(cls.PATH_COLUMNS),
            "path":    path,
            "coords":  ctrl._path_coords(session, path),
        }

    def _path_coords(self, session: SimulationSession, path: np.ndarray) -> np.ndarray:
        return session.mapping.to_screen(path[:, 1])

    # ──────────────────────────────────────────────────────────────────────────
    # Run plumbing
    # ──────────────────────────────────────────────────────────────────────────

    def _viewport(self, viewport) -> tuple:
        dw, dh = self.DEFAULT_VIEWPORT
        if viewport is None:
            return dw, dh
        if not isinstance(viewport, (list, tuple)) or len(viewport) != 2:
            raise InvalidParameterError("Viewport must be a [width, height] pair.")
        return (parse_extent(viewport[0], "Viewport width", dw),
                parse_extent(viewport[1], "Viewport height", dh))

    def _launch(self, session: SimulationSession, schedule: bool = True) -> None:
        ticker = None
        if schedule:
            ticker = self._ticker_factory(self.TICK_INTERVAL, self.tick, name=self.MOTION)
            ticker.start()
        self._halt()
        self._before_launch()
        self._ticker = ticker
        self._scheduled = schedule

        self.session = session
        session.running = True
        self.mode = RUNNING
        self.status_msg = self.STATUS_RUNNING
        self.pending_events.append({"type": "running", "motion": self.MOTION, "value": True})
        if session.variant:
            self.pending_events.append({
                "type": "set_character", "motion": self.MOTION, "variant": session.variant,
            })
        self._emit_initial()
        logger.info("%s: run started (total=%.3f s)", self.MOTION, session.total_duration)

    def _before_launch(self) -> None:
        pass

    def _halt(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None
        if self.session is not None and self.session.running:
            self.session.running = False
            self.pending_events.append({"type": "running", "motion": self.MOTION, "value": False})

    def _finish(self) -> None:
        self._halt()
        self.mode = TERMINATED

    def _publish(self, telemetry) -> None:
        self.last_telemetry = telemetry
        self.pending_events.append({
            "type":    "telemetry",
            "motion":  self.MOTION,
            "data":    telemetry.to_dict(),
            "display": telemetry.display(),
        })

    def _emit_sprite(self, coord: float, **extra) -> None:
        ev = {"type": "sprite", "motion": self.MOTION, "coord": float(coord)}
        ev.update(extra)
        self.pending_events.append(ev)

    def _next_time(self, session: SimulationSession) -> float:
        session.ticks += 1
        return round(session.ticks * self.SIM_DT, 10)


# ══════════════════════════════════════════════════════════════════════════════
# Free fall
# ══════════════════════════════════════════════════════════════════════════════

class FreeFallController(_MotionController):
    """Drops a sprite from the initial height; bounces it on impact."""

    MOTION           = "free_fall"
    TICK_INTERVAL    = 0.025
    SIM_DT           = 0.05
    DEFAULT_VIEWPORT = (600.0, 420.0)
    TELEMETRY        = FreeFallTelemetry
    PATH_COLUMNS     = ("time", "height", "distance_fallen", "velocity")

    VARIANTS = ("ball", "parachute")

    def __init__(self, ticker_factory=RepeatingTask):
        super().__init__(ticker_factory)
        self.bounce: Optional[BounceEffect] = None
        self._bounce_ticker = None

    def _prepare(self, height, velocity=None, variant: str = "ball",
                 viewport=None) -> SimulationSession:
        h0 = parse_number(height, "Height")
        v0 = parse_optional(velocity, "Initial velocity")
        if v0 is None:
            v0 = 0.0
        if h0 < 0:
            raise InvalidParameterError("Height must be a non-negative value.")
        if variant not in self.VARIANTS:
            variant = self.VARIANTS[0]

        motion = FreeFallMotion(h0, v0)
        _, vh = self._viewport(viewport)
        return SimulationSession(
            motion=motion,
            total_duration=motion.time_to_ground(),
            mapping=VerticalMapping.for_viewport(vh, h0),
            variant=variant,
        )

    def _before_launch(self) -> None:
        self._cancel_bounce()
        self.bounce = None

    def _path_coords(self, session: SimulationSession, path: np.ndarray) -> np.ndarray:
        return session.mapping.to_screen(np.maximum(path[:, 1], 0.0))

    def _emit_initial(self) -> None:
        s = self.session
        m = s.motion
        self._publish(FreeFallTelemetry(
            time=0.0,
            height=m.initial_height,
            distance_fallen=0.0,
            velocity=m.initial_velocity,
            time_remaining=s.total_duration,
            progress=0.0,
        ))
        self._emit_sprite(s.mapping.to_screen(m.initial_height))

    def tick(self) -> None:
        s = self.session
        if s is None or not s.running:
            return
        t = s.elapsed = self._next_time(s)
        m = s.motion

        y = m.position_at(t)
        height = max(y, 0.0)
        distance = max(m.initial_height - height, 0.0)
        total = s.total_duration
        remaining = NEVER if is_never(total) else max(total - t, 0.0)
        progress = min(t / total, 1.0) if total > 0 else 0.0

        self._publish(FreeFallTelemetry(t, height, distance, m.velocity_at(t), remaining, progress))
        self.status_msg = f"Current height: {height:.2f} m"
        logger.debug("free_fall t=%.2f y=%.3f", t, y)

        if y <= 0:
            self._on_impact()
            return
        self._emit_sprite(s.mapping.to_screen(y))

    def _on_impact(self) -> None:
        s = self.session
        m = s.motion
        # h0 = 0 has total_duration 0: the final snapshot keeps the tick time
        t_final = s.total_duration if s.total_duration > 0 else s.elapsed
        self._finish()

        rest_y = s.mapping.rest_y
        self._emit_sprite(rest_y)
        self._publish(FreeFallTelemetry(
            time=t_final,
            height=0.0,
            distance_fallen=m.initial_height,
            velocity=m.velocity_at(t_final),
            time_remaining=0.0,
            progress=1.0,
        ))
        self.status_msg = "Impact complete."
        logger.info("free_fall: impact at t=%.3f s, v=%.2f m/s", t_final, m.velocity_at(t_final))
        self._start_bounce(rest_y)

    # ── Bounce ────────────────────────────────────────────────────────────────

    def stop(self) -> None:
        """Stops the run and any bounce still playing."""
        super().stop()
        self._cancel_bounce()

    def _start_bounce(self, y: float) -> None:
        self._cancel_bounce()
        self.bounce = BounceEffect(y)
        if self._scheduled:
            self._bounce_ticker = self._ticker_factory(
                BounceEffect.TICK_INTERVAL, self.tick_bounce, name="bounce")
            self._bounce_ticker.start()

    def tick_bounce(self) -> None:
        """One bounce step; stops its own ticker after the last one."""
        if self.bounce is None:
            return
        y = self.bounce.tick()
        if y is not None:
            self._emit_sprite(y, bounce=True)
        if self.bounce.done:
            self._cancel_bounce()

    def _cancel_bounce(self) -> None:
        if self._bounce_ticker is not None:
            self._bounce_ticker.stop()
            self._bounce_ticker = None


# ══════════════════════════════════════════════════════════════════════════════
# Uniform rectilinear motion
# ══════════════════════════════════════════════════════════════════════════════

class UniformMotionController(_MotionController):
    """Drives a sprite along x at constant velocity for a fixed duration."""

    MOTION           = "uniform"
    TICK_INTERVAL    = 0.040
    SIM_DT           = 0.05
    DEFAULT_VIEWPORT = (600.0, 300.0)
    TELEMETRY        = UniformTelemetry
    PATH_COLUMNS     = ("time", "position", "displacement")

    def _prepare(self, start, velocity=None, target=None, duration=None,
                 variant: str = "car", viewport=None) -> SimulationSession:
        x0 = parse_number(start, "Initial position")
        total = parse_number(duration, "Duration")
        if total <= 0:
            raise InvalidParameterError("Duration must be greater than zero.")
        xf = parse_optional(target, "Final position")
        v = parse_optional(velocity, "Velocity")

        # unset or zero speed: derive it from the target, if there is one
        if v is None or v == 0:
            if xf is None:
                raise InvalidParameterError(
                    "Missing data: enter the final position (xf) to derive the velocity.")
            v = (xf - x0) / total

        motion = UniformMotion(x0, v)
        if xf is not None and motion.time_to_reach(xf) < 0:
            raise InvalidParameterError(
                f"Cannot reach xf={xf:.2f} m from x0={x0:.2f} m with v={v:.2f} m/s: "
                "the object is moving away from the target.")

        x_end = xf if xf is not None else motion.position_at(total)
        vw, _ = self._viewport(viewport)
        return SimulationSession(
            motion=motion,
            total_duration=total,
            mapping=HorizontalMapping.for_viewport(vw, x0, x_end),
            variant=variant,
            final_position=x_end,
        )

    def _emit_initial(self) -> None:
        s = self.session
        m = s.motion
        self._publish(UniformTelemetry(
            time=0.0,
            position=m.position_at(0.0),
            displacement=0.0,
            velocity=m.velocity,
            final_position=s.final_position,
            progress=0.0,
        ))
        self._emit_sprite(s.mapping.to_screen(m.initial_position))

    def tick(self) -> None:
        s = self.session
        if s is None or not s.running:
            return
        total = s.total_duration
        t = s.elapsed = min(self._next_time(s), total)
        m = s.motion

        x = m.position_at(t)
        displacement = m.displacement_at(t)
        self._emit_sprite(s.mapping.to_screen(x))

        progress = min(1.0, max(0.0, t / total))
        self._publish(UniformTelemetry(t, x, displacement, m.velocity, s.final_position, progress))
        self.status_msg = f"Advance: {displacement:.2f} m"
        logger.debug("uniform t=%.2f x=%.3f", t, x)

        if t >= total:
            self._finish()
            self._publish(UniformTelemetry(
                time=total,
                position=m.position_at(total),
                displacement=m.displacement_at(total),
                velocity=m.velocity,
                final_position=s.final_position,
                progress=1.0,
            ))
            self.status_msg = "Simulation complete."
            logger.info("uniform: finished at x=%.2f m", m.position_at(total))
