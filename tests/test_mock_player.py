"""
Tests for the simulated player.
"""

import random
from unittest.mock import MagicMock

from whackamole.mock_player import PRESETS, MockPlayer
from whackamole.models.session import SessionPhase, SessionState, SessionTiming, TapResult
from whackamole.utils.constants import NO_TARGET


def _controller(target=4, phase=SessionPhase.ACTIVE):
    controller = MagicMock()
    controller.grid_size = 9
    controller.snapshot.return_value = SessionState.fresh(phase=phase).evolve(
        active_target_index=target,
    )
    controller.tap_hole.side_effect = (
        lambda index: TapResult.HIT if index == target else TapResult.MISS
    )
    return controller


class TestTriggerTap:
    """Single taps decided from one look at the grid."""

    def test_accurate_tap_hits_target(self, qtbot):
        """An on-target roll taps the mole's hole."""
        controller = _controller(target=6)
        rng = MagicMock(wraps=random.Random(1))
        rng.random.return_value = 0.0
        player = MockPlayer(controller, preset="sharp_shooter", rng=rng)

        results = []
        player.tapped.connect(lambda index, result: results.append((index, result)))
        assert player.trigger_tap() == 6
        controller.tap_hole.assert_called_once_with(6)
        assert results == [(6, TapResult.HIT)]

    def test_inaccurate_tap_misses_target(self, qtbot):
        """An off-target roll taps some other hole."""
        controller = _controller(target=6)
        rng = MagicMock(wraps=random.Random(1))
        rng.random.return_value = 0.999
        player = MockPlayer(controller, preset="casual", rng=rng)

        index = player.trigger_tap()
        assert index != 6
        assert 0 <= index < 9

    def test_patient_player_waits_for_mole(self, qtbot):
        """Non-eager presets do not tap an empty grid."""
        controller = _controller(target=NO_TARGET)
        player = MockPlayer(controller, preset="casual")
        assert player.trigger_tap() is None
        controller.tap_hole.assert_not_called()

    def test_eager_player_taps_empty_grid(self, qtbot):
        """The button masher taps even with no mole up."""
        controller = _controller(target=NO_TARGET)
        player = MockPlayer(controller, preset="button_masher")
        assert player.trigger_tap() is not None
        assert player.tap_count == 1

    def test_unknown_preset_falls_back(self, qtbot):
        """Unknown preset names fall back to casual."""
        player = MockPlayer(_controller(), preset="wizard")
        player.set_preset("also-unknown")
        assert player._preset is PRESETS["casual"]


class TestPlayLoop:
    """Background loop against a real session."""

    def test_plays_until_session_ends(self, qtbot, make_controller):
        """The loop taps until the session ends, then exits."""
        controller = make_controller(
            timing=SessionTiming(tick_seconds=0.02, duration=25, spawn_time_scale=0.05),
        )
        player = MockPlayer(controller, preset="sharp_shooter", reaction_scale=0.05)

        controller.start_session(1, unlocked_levels=[1])
        player.start()
        qtbot.waitUntil(
            lambda: controller.snapshot().phase is SessionPhase.ENDED, timeout=5000,
        )
        assert player.wait(2000)

        state = controller.snapshot()
        assert state.hits + state.misses <= player.tap_count
        assert state.score >= 0
