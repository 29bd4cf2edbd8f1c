"""
SQLite database manager for Whack-a-Mole.

Handles persistence of finished-session score records and per-player
lifetime statistics. Database file: ~/.whackamole/whackamole.db

The connection is shared between the UI thread and the background
score submitter, so every statement runs under one mutex.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QMutex, QMutexLocker

from whackamole.models.score import PlayerAggregate, ScoreRecord
from whackamole.utils.config import APP_DIR
from whackamole.utils.constants import LEADERBOARD_SIZE

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).parent / "schema.sql"
DEFAULT_DB_PATH = APP_DIR / "whackamole.db"


class Database:
    """SQLite wrapper implementing the score and player persistence contract."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or DEFAULT_DB_PATH
        self.conn: Optional[sqlite3.Connection] = None
        self._mutex = QMutex()
        self._init_db()

    def _init_db(self):
        """Initialize database connection and create tables."""
        if str(self.db_path) != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")

        schema = SCHEMA_FILE.read_text()
        self.conn.executescript(schema)
        self.conn.commit()
        logger.info(f"Database initialized at {self.db_path}")

    def close(self):
        """Close the database connection."""
        with QMutexLocker(self._mutex):
            if self.conn:
                self.conn.close()
                self.conn = None

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with QMutexLocker(self._mutex):
            cur = self.conn.execute(sql, params)
            self.conn.commit()
            return cur

    def _fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with QMutexLocker(self._mutex):
            return self.conn.execute(sql, params).fetchall()

    def _fetchone(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with QMutexLocker(self._mutex):
            return self.conn.execute(sql, params).fetchone()

    # =========================================================================
    # Scores
    # =========================================================================

    def insert_score_record(self, record: ScoreRecord) -> int:
        """Save a finished session and return its ID."""
        cur = self._execute(
            """
            INSERT INTO scores (player_name, score, difficulty, hits, misses, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.player_name, record.score, record.difficulty,
                record.hits, record.misses, record.created_at.isoformat(),
            ),
        )
        logger.info(
            f"Score saved: id={cur.lastrowid} player={record.player_name} "
            f"score={record.score} ({record.difficulty})"
        )
        return cur.lastrowid

    def query_top_scores(self, n: int = LEADERBOARD_SIZE) -> list[ScoreRecord]:
        """Best n scores, highest first; ties go to the most recent."""
        rows = self._fetchall(
            """
            SELECT * FROM scores
            ORDER BY score DESC, created_at DESC, id DESC
            LIMIT ?
            """,
            (n,),
        )
        return [_row_to_score(r) for r in rows]

    def get_scores_by_difficulty(self, difficulty: str) -> list[ScoreRecord]:
        rows = self._fetchall(
            "SELECT * FROM scores WHERE difficulty = ? ORDER BY score DESC, created_at DESC",
            (difficulty,),
        )
        return [_row_to_score(r) for r in rows]

    def get_overall_best_score(self) -> int:
        row = self._fetchone("SELECT MAX(score) AS best FROM scores")
        return row["best"] if row and row["best"] is not None else 0

    def get_best_score_for_player(self, player_name: str) -> int:
        row = self._fetchone(
            "SELECT MAX(score) AS best FROM scores WHERE player_name = ?",
            (player_name,),
        )
        return row["best"] if row and row["best"] is not None else 0

    def delete_all_scores(self):
        self._execute("DELETE FROM scores")
        logger.info("All scores deleted")

    # =========================================================================
    # Players
    # =========================================================================

    def upsert_player_aggregate(self, player_name: str, score: int,
                                hits: int, misses: int):
        """Fold one finished session into a player's lifetime stats.

        Creates the player on first sight; otherwise increments games
        played, adds hits and misses, and raises the best score.
        """
        self._execute(
            """
            INSERT INTO players (name, games_played, total_hits, total_misses, best_score)
            VALUES (?, 1, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                games_played = games_played + 1,
                total_hits   = total_hits + excluded.total_hits,
                total_misses = total_misses + excluded.total_misses,
                best_score   = MAX(best_score, excluded.best_score)
            """,
            (player_name, hits, misses, score),
        )
        logger.debug(
            f"Player stats merged: {player_name} +{hits} hits "
            f"+{misses} misses score={score}"
        )

    def get_player(self, name: str) -> Optional[PlayerAggregate]:
        row = self._fetchone("SELECT * FROM players WHERE name = ? LIMIT 1", (name,))
        return _row_to_player(row) if row else None

    def get_all_players(self) -> list[PlayerAggregate]:
        """All players, best score first."""
        rows = self._fetchall("SELECT * FROM players ORDER BY best_score DESC, name")
        return [_row_to_player(r) for r in rows]

    def delete_all_players(self):
        self._execute("DELETE FROM players")
        logger.info("All players deleted")

    # =========================================================================
    # Clear data
    # =========================================================================

    def clear_all_data(self):
        """Wipe the leaderboard and every player's stats."""
        self.delete_all_scores()
        self.delete_all_players()


def _row_to_score(r: sqlite3.Row) -> ScoreRecord:
    return ScoreRecord(
        player_name=r["player_name"],
        score=r["score"],
        difficulty=r["difficulty"],
        hits=r["hits"],
        misses=r["misses"],
        created_at=datetime.fromisoformat(r["created_at"]),
        id=r["id"],
    )


def _row_to_player(r: sqlite3.Row) -> PlayerAggregate:
    return PlayerAggregate(
        name=r["name"],
        games_played=r["games_played"],
        total_hits=r["total_hits"],
        total_misses=r["total_misses"],
        best_score=r["best_score"],
        id=r["id"],
    )
