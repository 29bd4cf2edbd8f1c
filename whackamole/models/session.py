"""
Session model for Whack-a-Mole.

A session is one timed play-through: a short countdown, then moles pop
up until the clock runs out. SessionState is an immutable snapshot;
the SessionController replaces it wholesale on every change so that
subscribers never observe a half-applied update.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from whackamole.utils.constants import (
    COUNTDOWN_TICKS,
    NO_TARGET,
    SESSION_DURATION,
    TICK_SECONDS,
)


class SessionPhase(Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    ACTIVE = "active"
    ENDED = "ended"


class TapResult(Enum):
    HIT = "hit"
    MISS = "miss"

    def __bool__(self) -> bool:
        return self is TapResult.HIT


@dataclass(frozen=True)
class SessionTiming:
    """Real-time pacing for a session.

    Attributes:
        tick_seconds: Length of one clock / countdown tick.
        countdown_ticks: Ticks spent in Countdown before going Active.
        duration: Clock ticks in the Active phase.
        spawn_time_scale: Multiplier applied to the millisecond durations
                          from the difficulty model (1.0 = real time).
    """
    tick_seconds: float = TICK_SECONDS
    countdown_ticks: int = COUNTDOWN_TICKS
    duration: int = SESSION_DURATION
    spawn_time_scale: float = 1.0

    def scaled_seconds(self, duration_ms: int) -> float:
        return duration_ms * self.spawn_time_scale / 1000.0


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a single session.

    Attributes:
        phase: Lifecycle phase.
        level: Current difficulty level (>= 1).
        active_target_index: Hole holding the mole, or -1 when none is visible.
        score: Points accumulated this session.
        hits: Successful taps.
        misses: Taps on an empty hole.
        combo: Consecutive hits without a miss.
        hits_this_level: Hits since the last level-up.
        highest_level_reached: Highest level seen this session.
        time_remaining: Clock ticks left.
        starting_level: Level chosen at session start.
        last_tap_was_hit: Outcome of the latest tap (None before any tap).
        final_countdown: True during the last few ticks of the clock.
    """
    phase: SessionPhase = SessionPhase.IDLE
    level: int = 1
    active_target_index: int = NO_TARGET
    score: int = 0
    hits: int = 0
    misses: int = 0
    combo: int = 0
    hits_this_level: int = 0
    highest_level_reached: int = 1
    time_remaining: int = SESSION_DURATION
    starting_level: int = 1
    last_tap_was_hit: Optional[bool] = None
    final_countdown: bool = False

    @classmethod
    def fresh(cls, level: int = 1, duration: int = SESSION_DURATION,
              phase: SessionPhase = SessionPhase.IDLE) -> "SessionState":
        """Zeroed counters at the given starting level."""
        return cls(
            phase=phase,
            level=level,
            highest_level_reached=level,
            time_remaining=duration,
            starting_level=level,
        )

    def evolve(self, **changes) -> "SessionState":
        return replace(self, **changes)

    @property
    def is_active(self) -> bool:
        return self.phase is SessionPhase.ACTIVE

    @property
    def total_taps(self) -> int:
        return self.hits + self.misses

    @property
    def accuracy(self) -> float:
        """Hit percentage over all counted taps."""
        if not self.total_taps:
            return 0.0
        return round(100.0 * self.hits / self.total_taps, 1)
