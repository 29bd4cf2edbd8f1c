"""
Persisted records for Whack-a-Mole.

ScoreRecord: One finished session, written once at session end.
PlayerAggregate: Lifetime totals for one player name.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ScoreRecord:
    """A single finished session as shown on the leaderboard.

    Attributes:
        player_name: Name from settings at the time the session ended.
        score: Final score.
        difficulty: Highest level reached, rendered as a label ("Level 4").
        hits: Successful taps.
        misses: Taps on an empty hole.
        created_at: When the record was created.
        id: Database primary key (set after persistence).
    """
    player_name: str
    score: int
    difficulty: str
    hits: int
    misses: int
    created_at: datetime = field(default_factory=datetime.now)
    id: Optional[int] = None


@dataclass
class PlayerAggregate:
    """Cumulative statistics for one player name."""
    name: str
    games_played: int = 0
    total_hits: int = 0
    total_misses: int = 0
    best_score: int = 0
    id: Optional[int] = None

    @property
    def accuracy(self) -> float:
        taps = self.total_hits + self.total_misses
        if not taps:
            return 0.0
        return round(100.0 * self.total_hits / taps, 1)
