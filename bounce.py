"""Post-impact bounce: a short cosmetic up/down wobble of the free-fall sprite."""

from dataclasses import dataclass


@dataclass
class BounceEffect:
    """Displaces the sprite ±OFFSET_PX per tick; flips every FLIP_EVERY ticks.

    Independent of simulated time and telemetry.  `tick()` returns the new
    sprite y, or None once the effect has run MAX_TICKS ticks.
    """
    y: float
    bounce_count: int = 0
    direction: str = "up"

    TICK_INTERVAL = 0.020
    OFFSET_PX     = 3.0
    FLIP_EVERY    = 3
    MAX_TICKS     = 16

    @property
    def done(self) -> bool:
        return self.bounce_count >= self.MAX_TICKS

    def tick(self):
        if self.done:
            return None
        # screen y grows downward: "up" is a negative offset
        self.y += -self.OFFSET_PX if self.direction == "up" else self.OFFSET_PX
        self.bounce_count += 1
        if self.bounce_count % self.FLIP_EVERY == 0:
            self.direction = "down" if self.direction == "up" else "up"
        return self.y
