"""
RepeatingTask — fixed-interval callback on the running asyncio loop.

Replaces a GUI toolkit timer.  The callback runs to completion on the loop
thread between sleeps, so it must never block or await.

    task = RepeatingTask(0.025, ctrl.tick, name="free_fall")
    task.start()     # cancels any previous run first
    task.stop()      # idempotent
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTask:
    def __init__(self, interval: float, callback: Callable[[], None], name: str = "tick"):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Cancel-then-create. Must be called from inside a running loop."""
        self.stop()
        loop = asyncio.get_running_loop()
        self.ticks = 0
        self._task = loop.create_task(self._run(), name=f"ticker:{self.name}")
        logger.debug("ticker %s started (%.3fs)", self.name, self.interval)

    def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        # A callback stopping its own ticker lands here too; cancel() then
        # takes effect at the next sleep.
        task.cancel()
        logger.debug("ticker %s stopped after %d ticks", self.name, self.ticks)

    async def _run(self) -> None:
        me = asyncio.current_task()
        while True:
            await asyncio.sleep(self.interval)
            if self._task is not me:
                return
            self.ticks += 1
            try:
                self.callback()
            except Exception:
                logger.exception("ticker %s: callback failed, stopping", self.name)
                if self._task is me:
                    self._task = None
                return
