"""
Simulated player for Whack-a-Mole.

Taps holes on a random reaction delay with a preset accuracy, so a full
session can be played headless from the CLI, or driven in demos without
anyone at the screen. Uses the same tap_hole entry point as real input.
"""

import logging
import random
from typing import Optional

from PyQt6.QtCore import pyqtSignal

from whackamole.models.session import SessionPhase
from whackamole.utils.constants import NO_TARGET
from whackamole.utils.threads import LoopThread

logger = logging.getLogger(__name__)


# Player presets
PRESETS = {
    "casual": {
        "description": "Relaxed player, waits for a mole, hits most of them",
        "accuracy": 0.75,            # chance a tap lands on the visible mole
        "reaction": (0.45, 0.9),     # seconds between looks at the grid
        "eager": False,              # taps even when no mole is up
    },
    "sharp_shooter": {
        "description": "Fast and precise, rarely misses",
        "accuracy": 0.97,
        "reaction": (0.2, 0.35),
        "eager": False,
    },
    "button_masher": {
        "description": "Taps constantly, hits by luck as often as by aim",
        "accuracy": 0.4,
        "reaction": (0.08, 0.2),
        "eager": True,
    },
}


class MockPlayer(LoopThread):
    """Plays a session against a SessionController.

    Signals:
        tapped(int, object): Hole index and TapResult for every tap made.
    """

    tapped = pyqtSignal(int, object)

    def __init__(
        self,
        controller,
        preset: str = "casual",
        reaction_scale: float = 1.0,
        rng: Optional[random.Random] = None,
        parent=None,
    ):
        """
        Args:
            controller: SessionController to tap against.
            preset: Player preset name (see PRESETS).
            reaction_scale: Multiplier on the preset's reaction delays.
            rng: Random source.
        """
        super().__init__(parent)
        self._controller = controller
        self._preset_name = preset if preset in PRESETS else "casual"
        self._preset = PRESETS[self._preset_name]
        self._reaction_scale = reaction_scale
        self._rng = rng or random.Random()
        self.tap_count = 0

    def set_preset(self, preset: str):
        if preset in PRESETS:
            self._preset_name = preset
            self._preset = PRESETS[preset]
            logger.info(f"Mock player preset changed to: {preset}")

    def run(self):
        logger.info(f"Mock player started (preset={self._preset_name})")

        while self._running:
            delay = self._rng.uniform(*self._preset["reaction"]) * self._reaction_scale
            if not self._sleep(delay):
                break

            phase = self._controller.snapshot().phase
            if phase in (SessionPhase.IDLE, SessionPhase.ENDED):
                break
            if phase is SessionPhase.ACTIVE:
                self.trigger_tap()

        logger.info(f"Mock player stopped after {self.tap_count} taps")

    def trigger_tap(self) -> Optional[int]:
        """Look at the grid once and tap. Returns the hole tapped, if any."""
        target = self._controller.snapshot().active_target_index
        if target == NO_TARGET and not self._preset["eager"]:
            return None

        if target != NO_TARGET and self._rng.random() < self._preset["accuracy"]:
            index = target
        else:
            others = [i for i in range(self._controller.grid_size) if i != target]
            index = self._rng.choice(others)

        result = self._controller.tap_hole(index)
        self.tap_count += 1
        self.tapped.emit(index, result)
        return index
