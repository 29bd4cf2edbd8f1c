"""
Session timers for Whack-a-Mole.

CountdownTimer: "3, 2, 1" before the session goes live. Nothing else
runs during the countdown; each tick only fires an audio cue.

SessionClock: Decrements the remaining time once per tick while the
session is Active. In the last few ticks the controller raises the
final countdown cue; reaching zero is what ends the session.
"""

import logging

from whackamole.models.session import SessionTiming
from whackamole.utils.threads import LoopThread

logger = logging.getLogger(__name__)


class CountdownTimer(LoopThread):
    """Counts down the pre-game ticks, then hands over to the Active phase."""

    def __init__(self, controller, generation: int, timing: SessionTiming, parent=None):
        super().__init__(parent)
        self._controller = controller
        self._generation = generation
        self._timing = timing

    def run(self):
        for remaining in range(self._timing.countdown_ticks, 0, -1):
            if not self._controller.countdown_tick(self._generation, remaining):
                return
            if not self._sleep(self._timing.tick_seconds):
                return
        if self._running:
            self._controller.begin_active(self._generation)


class SessionClock(LoopThread):
    """One tick per `timing.tick_seconds` until time runs out."""

    def __init__(self, controller, generation: int, timing: SessionTiming, parent=None):
        super().__init__(parent)
        self._controller = controller
        self._generation = generation
        self._timing = timing

    def run(self):
        logger.debug(f"Session clock started (session {self._generation})")

        while self._running:
            if not self._sleep(self._timing.tick_seconds):
                break
            remaining = self._controller.tick_clock(self._generation)
            if remaining is None:
                break
            if remaining == 0:
                # The controller ends the session on the tick that reaches zero
                break

        logger.debug(f"Session clock stopped (session {self._generation})")
