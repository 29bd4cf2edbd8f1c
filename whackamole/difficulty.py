"""
Difficulty scaling for Whack-a-Mole.

Every level shortens how long a mole stays up and the pause before the
next one by a constant decay factor, down to fixed floors. Points per
hit grow linearly with the level.

    visible_duration(L) = max(BASE_VISIBLE_MS * DECAY_RATE^(L-1), VISIBLE_FLOOR_MS)
    spawn_gap(L)        = max(BASE_GAP_MS * DECAY_RATE^(L-1), GAP_FLOOR_MS)
    points_for_hit(L)   = BASE_HIT_POINTS + L * PER_LEVEL_POINT_BONUS
"""

from whackamole.utils.constants import (
    BASE_GAP_MS,
    BASE_HIT_POINTS,
    BASE_VISIBLE_MS,
    COMBO_BONUS,
    DECAY_RATE,
    GAP_FLOOR_MS,
    LEVEL_UNLOCKS,
    PER_LEVEL_POINT_BONUS,
    VISIBLE_FLOOR_MS,
)


def _decayed(base_ms: float, level: int, floor_ms: int) -> int:
    level = max(1, int(level))
    return max(int(base_ms * DECAY_RATE ** (level - 1)), floor_ms)


def visible_duration_ms(level: int) -> int:
    """How long a mole stays up at the given level (ms)."""
    return _decayed(BASE_VISIBLE_MS, level, VISIBLE_FLOOR_MS)


def spawn_gap_ms(level: int) -> int:
    """Pause between a mole hiding and the next one appearing (ms)."""
    return _decayed(BASE_GAP_MS, level, GAP_FLOOR_MS)


def points_for_hit(level: int) -> int:
    return BASE_HIT_POINTS + level * PER_LEVEL_POINT_BONUS


def combo_bonus(combo: int) -> int:
    """Bonus on top of the base points for the combo-th consecutive hit."""
    return COMBO_BONUS * max(0, combo - 1)


def difficulty_label(level: int) -> str:
    return f"Level {level}"


def unlocked_starting_levels(best_score: int) -> list[int]:
    """Starting levels available for a given best score, ascending."""
    return [level for threshold, level in LEVEL_UNLOCKS if best_score >= threshold]
