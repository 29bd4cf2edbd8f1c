"""
Tests for the command-line entry point and composition root.
"""

from argparse import Namespace

from whackamole.database.db import Database
from whackamole.main import build_app, main, render_grid
from whackamole.models.score import ScoreRecord


class TestOneShotCommands:
    """--leaderboard and --clear-data run without starting a session."""

    def test_leaderboard(self, tmp_path, capsys):
        """--leaderboard prints saved scores."""
        db_path = tmp_path / "scores.db"
        db = Database(db_path=db_path)
        db.insert_score_record(ScoreRecord("Ann", 420, "Level 3", 30, 4))
        db.close()

        main(["--leaderboard", "--db", str(db_path)])
        out = capsys.readouterr().out
        assert "Leaderboard" in out
        assert "Ann" in out
        assert "420" in out

    def test_empty_leaderboard(self, tmp_path, capsys):
        """An empty database prints a placeholder."""
        main(["--leaderboard", "--db", str(tmp_path / "empty.db")])
        assert "No scores yet." in capsys.readouterr().out

    def test_clear_data(self, tmp_path, capsys):
        """--clear-data wipes scores and player stats."""
        db_path = tmp_path / "scores.db"
        db = Database(db_path=db_path)
        db.insert_score_record(ScoreRecord("Ann", 420, "Level 3", 30, 4))
        db.upsert_player_aggregate("Ann", 420, 30, 4)
        db.close()

        main(["--clear-data", "--db", str(db_path)])
        db = Database(db_path=db_path)
        assert db.query_top_scores(10) == []
        assert db.get_all_players() == []
        db.close()

    def test_clear_scores_keeps_players(self, tmp_path, capsys):
        """--clear-scores empties the leaderboard but keeps player stats."""
        db_path = tmp_path / "scores.db"
        db = Database(db_path=db_path)
        db.insert_score_record(ScoreRecord("Ann", 420, "Level 3", 30, 4))
        db.upsert_player_aggregate("Ann", 420, 30, 4)
        db.close()

        main(["--clear-scores", "--db", str(db_path)])
        assert "All scores deleted." in capsys.readouterr().out
        db = Database(db_path=db_path)
        assert db.query_top_scores(10) == []
        assert db.get_player("Ann").best_score == 420
        db.close()

    def test_players(self, tmp_path, capsys):
        """--players prints each player's lifetime stats."""
        db_path = tmp_path / "scores.db"
        db = Database(db_path=db_path)
        db.upsert_player_aggregate("Ann", 420, 30, 10)
        db.close()

        main(["--players", "--db", str(db_path)])
        out = capsys.readouterr().out
        assert "Players" in out
        assert "Ann" in out
        assert "75.0% accuracy" in out


class TestBuildApp:
    """Collaborators are constructed once and wired together."""

    def test_wiring(self, qtbot, tmp_path):
        """CLI arguments reach the settings and the session timing."""
        args = Namespace(
            settings=tmp_path / "settings.json",
            db=tmp_path / "scores.db",
            player="Bob",
            tick=0.5,
            duration=20,
        )
        app = build_app(args)
        try:
            assert app.settings.player_name == "Bob"
            assert app.controller.timing.tick_seconds == 0.5
            assert app.controller.timing.duration == 20
            assert app.controller.timing.spawn_time_scale == 0.5
            assert app.controller.snapshot().time_remaining == 20
        finally:
            app.controller.shutdown()
            app.database.close()


class TestRenderGrid:

    def test_marks_active_hole(self):
        """The active hole is drawn in the right row."""
        lines = render_grid(4, 9).splitlines()
        assert len(lines) == 3
        assert "(@)" in lines[1]
        assert "(@)" not in lines[0] + lines[2]

    def test_empty_grid(self):
        """With no target nothing is marked."""
        assert "(@)" not in render_grid(-1, 9)
