"""
Tests for the SQLite persistence gateway.

Validates:
  - Score records round-trip and leaderboard ordering
  - Player aggregates are created, merged and keep the best score
  - Wipes and best-score queries
"""

from datetime import datetime, timedelta

from whackamole.models.score import PlayerAggregate, ScoreRecord


def _record(score, name="Player", when=None, difficulty="Level 1", hits=0, misses=0):
    return ScoreRecord(
        player_name=name,
        score=score,
        difficulty=difficulty,
        hits=hits,
        misses=misses,
        created_at=when or datetime.now(),
    )


class TestScores:
    """Score record storage and leaderboard queries."""

    def test_insert_returns_id(self, database):
        """A saved record reads back with its new ID."""
        record_id = database.insert_score_record(_record(120, hits=9, misses=2))
        assert record_id > 0

        [stored] = database.query_top_scores(10)
        assert stored.id == record_id
        assert stored.score == 120
        assert stored.hits == 9
        assert stored.misses == 2
        assert stored.difficulty == "Level 1"

    def test_top_scores_descending(self, database):
        """The leaderboard lists the highest score first."""
        for score in (50, 400, 120, 0, 999):
            database.insert_score_record(_record(score))
        scores = [r.score for r in database.query_top_scores(10)]
        assert scores == [999, 400, 120, 50, 0]

    def test_top_scores_limit(self, database):
        """Only the requested number of scores comes back."""
        for score in range(15):
            database.insert_score_record(_record(score))
        top = database.query_top_scores(3)
        assert [r.score for r in top] == [14, 13, 12]

    def test_ties_most_recent_first(self, database):
        """Equal scores are ordered newest first."""
        base = datetime(2026, 1, 1, 12, 0, 0)
        database.insert_score_record(_record(300, name="early", when=base))
        database.insert_score_record(_record(300, name="late", when=base + timedelta(minutes=5)))
        database.insert_score_record(_record(300, name="middle", when=base + timedelta(minutes=1)))

        names = [r.player_name for r in database.query_top_scores(3)]
        assert names == ["late", "middle", "early"]

    def test_scores_by_difficulty(self, database):
        """Filtering by label keeps score order."""
        database.insert_score_record(_record(10, difficulty="Level 1"))
        database.insert_score_record(_record(90, difficulty="Level 4"))
        database.insert_score_record(_record(70, difficulty="Level 4"))
        scores = database.get_scores_by_difficulty("Level 4")
        assert [r.score for r in scores] == [90, 70]

    def test_best_scores(self, database):
        """Best overall and per player; zero when nothing matches."""
        assert database.get_overall_best_score() == 0
        database.insert_score_record(_record(400, name="ann"))
        database.insert_score_record(_record(900, name="bob"))
        database.insert_score_record(_record(650, name="ann"))
        assert database.get_overall_best_score() == 900
        assert database.get_best_score_for_player("ann") == 650
        assert database.get_best_score_for_player("nobody") == 0

    def test_delete_all_scores(self, database):
        """Deleting scores empties the leaderboard."""
        database.insert_score_record(_record(10))
        database.delete_all_scores()
        assert database.query_top_scores(10) == []


class TestPlayers:
    """Player aggregate upsert and queries."""

    def test_first_session_creates_player(self, database):
        """The first session creates the player with its totals."""
        database.upsert_player_aggregate("ann", 200, 12, 3)
        player = database.get_player("ann")
        assert player == PlayerAggregate(
            name="ann", games_played=1, total_hits=12,
            total_misses=3, best_score=200, id=player.id,
        )

    def test_merge_accumulates(self, database):
        """Later sessions add up games, hits and misses."""
        database.upsert_player_aggregate("ann", 200, 12, 3)
        database.upsert_player_aggregate("ann", 150, 8, 5)
        player = database.get_player("ann")
        assert player.games_played == 2
        assert player.total_hits == 20
        assert player.total_misses == 8
        assert player.best_score == 200

    def test_best_score_raised(self, database):
        """A better session raises the best score."""
        database.upsert_player_aggregate("ann", 200, 12, 3)
        database.upsert_player_aggregate("ann", 450, 20, 1)
        assert database.get_player("ann").best_score == 450

    def test_unknown_player(self, database):
        """An unknown name has no aggregate."""
        assert database.get_player("ghost") is None

    def test_all_players_by_best_score(self, database):
        """Players list best score first."""
        database.upsert_player_aggregate("ann", 100, 1, 1)
        database.upsert_player_aggregate("bob", 700, 1, 1)
        database.upsert_player_aggregate("cat", 300, 1, 1)
        names = [p.name for p in database.get_all_players()]
        assert names == ["bob", "cat", "ann"]

    def test_clear_all_data(self, database):
        """Clearing wipes both scores and players."""
        database.insert_score_record(_record(10, name="ann"))
        database.upsert_player_aggregate("ann", 10, 1, 0)
        database.clear_all_data()
        assert database.query_top_scores(10) == []
        assert database.get_all_players() == []


class TestPlayerAggregateModel:
    """Derived values on a stored aggregate."""

    def test_accuracy_from_totals(self, database):
        """Accuracy is hits over all taps across every session."""
        database.upsert_player_aggregate("ann", 300, 10, 4)
        database.upsert_player_aggregate("ann", 250, 5, 1)
        assert database.get_player("ann").accuracy == 75.0

    def test_accuracy_without_taps(self):
        """A player who never tapped has zero accuracy."""
        assert PlayerAggregate(name="ann").accuracy == 0.0
