"""
Mole spawn loop for Whack-a-Mole.

While the session is Active, repeatedly:
  1. pick a hole at random, never the one just used
  2. publish it as the active target
  3. wait for the level's visible duration
  4. hide it, but only if it is still the mole this iteration put up
     (compare-and-clear: a hit may already have consumed it)
  5. wait for the level's spawn gap

Durations are looked up from the current level on every iteration, so
a level-up mid-session speeds up the very next mole.

All reads and writes of the active target go through the controller,
which applies them under its lock and drops them once the session this
scheduler belongs to is no longer live.
"""

import logging
import random
from typing import Optional

from whackamole.difficulty import spawn_gap_ms, visible_duration_ms
from whackamole.models.session import SessionTiming
from whackamole.utils.constants import GRID_SIZE, NO_TARGET
from whackamole.utils.threads import LoopThread

logger = logging.getLogger(__name__)


def choose_cell(grid_size: int, exclude: set, rng: random.Random) -> int:
    """Uniformly pick a hole in [0, grid_size) outside `exclude`."""
    candidates = [i for i in range(grid_size) if i not in exclude]
    if not candidates:
        raise ValueError(f"No free hole in a grid of {grid_size}")
    return rng.choice(candidates)


class SpawnScheduler(LoopThread):
    """Background loop that moves the mole around the grid."""

    def __init__(
        self,
        controller,
        generation: int,
        timing: SessionTiming,
        grid_size: int = GRID_SIZE,
        rng: Optional[random.Random] = None,
        parent=None,
    ):
        """
        Args:
            controller: SessionController that owns the session state.
            generation: Session token; mutations for older sessions are dropped.
            timing: Scales the difficulty model's millisecond durations.
            grid_size: Number of holes.
            rng: Random source for hole selection.
        """
        super().__init__(parent)
        self._controller = controller
        self._generation = generation
        self._timing = timing
        self._grid_size = grid_size
        self._rng = rng or random.Random()
        self._last_cell = NO_TARGET
        self.spawn_count = 0

    def _choose(self, current: int) -> int:
        """Pick the next hole, avoiding the visible one and the previous one."""
        exclude = {current, self._last_cell} - {NO_TARGET}
        if len(exclude) >= self._grid_size:
            exclude = {current} - {NO_TARGET}
        return choose_cell(self._grid_size, exclude, self._rng)

    def run(self):
        logger.debug(f"Spawn scheduler started (session {self._generation})")

        while self._running:
            cell = self._controller.spawn_target(self._generation, self._choose)
            if cell is None:
                break
            self._last_cell = cell
            self.spawn_count += 1

            level = self._controller.snapshot().level
            visible_s = self._timing.scaled_seconds(visible_duration_ms(level))
            if not self._sleep(visible_s):
                break

            if self._controller.hide_target(self._generation, cell):
                logger.debug(f"Mole at hole {cell} escaped")

            level = self._controller.snapshot().level
            gap_s = self._timing.scaled_seconds(spawn_gap_ms(level))
            if not self._sleep(gap_s):
                break

        logger.debug(
            f"Spawn scheduler stopped (session {self._generation}, "
            f"{self.spawn_count} spawns)"
        )
