"""
Tap resolution for Whack-a-Mole.

Pure transition: given the current session snapshot and the hole that
was tapped, return the next snapshot and whether it was a hit. The
controller applies the result under its lock; nothing here touches
shared state.

Hit (tapped hole holds the mole):
    hits, combo, hits_this_level += 1
    level up when hits_this_level reaches HITS_PER_LEVEL
    score += points_for_hit(level) + combo_bonus(combo)
    mole is consumed (active_target_index -> -1)

Miss (any other hole, including taps while no mole is up):
    misses += 1, combo -> 0
"""

from whackamole.difficulty import combo_bonus, points_for_hit
from whackamole.models.session import SessionState, TapResult
from whackamole.utils.constants import HITS_PER_LEVEL, NO_TARGET


def resolve_tap(state: SessionState, tapped_index: int,
                hits_per_level: int = HITS_PER_LEVEL) -> tuple[SessionState, TapResult]:
    """Resolve one tap against the given snapshot."""
    target = state.active_target_index
    if target == NO_TARGET or tapped_index != target:
        return _miss(state), TapResult.MISS
    return _hit(state, hits_per_level), TapResult.HIT


def _hit(state: SessionState, hits_per_level: int) -> SessionState:
    combo = state.combo + 1
    level = state.level
    hits_this_level = state.hits_this_level + 1
    highest = state.highest_level_reached

    # Level-up and reset happen in the same transition
    if hits_this_level >= hits_per_level:
        level += 1
        hits_this_level = 0
        highest = max(highest, level)

    gained = points_for_hit(level) + combo_bonus(combo)
    return state.evolve(
        hits=state.hits + 1,
        combo=combo,
        level=level,
        hits_this_level=hits_this_level,
        highest_level_reached=highest,
        score=state.score + gained,
        active_target_index=NO_TARGET,
        last_tap_was_hit=True,
    )


def _miss(state: SessionState) -> SessionState:
    return state.evolve(
        misses=state.misses + 1,
        combo=0,
        last_tap_was_hit=False,
    )
