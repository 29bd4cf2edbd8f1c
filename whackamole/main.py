"""
Whack-a-Mole — entry point.

Builds the application's collaborators once (settings, database,
session controller) and runs a headless session driven by the mock
player, printing events as they happen.

Usage:
    python -m whackamole.main                       # play one session at level 1
    python -m whackamole.main --preset sharp_shooter --level 3
    python -m whackamole.main --tick 0.2            # 5x faster clock and moles
    python -m whackamole.main --leaderboard         # print top scores and exit
    python -m whackamole.main --players             # print per-player stats and exit
    python -m whackamole.main --clear-scores        # wipe the leaderboard, keep player stats
    python -m whackamole.main --clear-data          # wipe scores and player stats
"""

import argparse
import logging
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QCoreApplication, QTimer

from whackamole.database.db import Database
from whackamole.mock_player import PRESETS, MockPlayer
from whackamole.models.session import SessionTiming
from whackamole.session_controller import InvalidLevelError, SessionController
from whackamole.utils.config import Settings
from whackamole.utils.constants import (
    GRID_COLS,
    LEADERBOARD_SIZE,
    SESSION_DURATION,
    TICK_SECONDS,
)


def setup_logging(verbose: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@dataclass
class App:
    """Everything the game needs, constructed once at startup."""
    settings: Settings
    database: Database
    controller: SessionController


def build_app(args) -> App:
    """Composition root: construct and wire the collaborators."""
    settings = Settings(path=args.settings)
    if args.player:
        settings.set_player_name(args.player)

    database = Database(db_path=args.db)

    # Scale mole timings with the clock so a faster tick keeps the game balanced
    timing = SessionTiming(
        tick_seconds=args.tick,
        duration=args.duration,
        spawn_time_scale=args.tick / TICK_SECONDS,
    )
    controller = SessionController(
        gateway=database,
        settings=settings,
        timing=timing,
    )
    return App(settings=settings, database=database, controller=controller)


def print_leaderboard(database: Database, n: int = LEADERBOARD_SIZE):
    scores = database.query_top_scores(n)
    print(f"\n{'='*60}")
    print("  Leaderboard")
    print(f"{'='*60}")
    if not scores:
        print("  No scores yet.")
    for rank, s in enumerate(scores, start=1):
        print(
            f"  {rank:2d}. {s.player_name:<16} {s.score:6d}  "
            f"{s.difficulty:<9} {s.hits:3d} hits / {s.misses:3d} misses  "
            f"{s.created_at:%Y-%m-%d %H:%M}"
        )
    print(f"{'='*60}")


def print_players(database: Database):
    players = database.get_all_players()
    print(f"\n{'='*60}")
    print("  Players")
    print(f"{'='*60}")
    if not players:
        print("  No players yet.")
    for p in players:
        print(
            f"  {p.name:<16} best {p.best_score:6d}  "
            f"{p.games_played:3d} games  {p.accuracy:5.1f}% accuracy"
        )
    print(f"{'='*60}")


def render_grid(active: int, size: int) -> str:
    cells = ["(@)" if i == active else " . " for i in range(size)]
    rows = [" ".join(cells[i:i + GRID_COLS]) for i in range(0, size, GRID_COLS)]
    return "\n".join(f"    {row}" for row in rows)


def run_cli(args):
    """Run one headless session with a simulated player."""
    app = QCoreApplication(sys.argv)
    game = build_app(args)
    controller = game.controller
    level = args.level or game.settings.starting_level

    player = MockPlayer(
        controller,
        preset=args.preset,
        reaction_scale=controller.timing.spawn_time_scale,
    )
    last_target = [None]

    def on_state(state):
        if args.show_grid and state.is_active and state.active_target_index != last_target[0]:
            last_target[0] = state.active_target_index
            print(render_grid(state.active_target_index, controller.grid_size))

    def on_countdown(n):
        print(f"  {n}...")

    def on_final(n):
        print(f"  ⏰ {n}")

    def on_tap(index, result):
        state = controller.snapshot()
        mark = "✅ HIT " if result else "❌ MISS"
        print(
            f"  {mark} hole {index}  score={state.score:5d}  "
            f"combo={state.combo:2d}  level={state.level}  "
            f"time={state.time_remaining}"
        )

    def on_ended(state):
        player.stop()
        print(f"\n{'='*60}")
        print(f"  Game Over — {game.settings.player_name}")
        print(f"{'='*60}")
        print(f"  Score:          {state.score}")
        print(f"  Hits / Misses:  {state.hits} / {state.misses} ({state.accuracy}%)")
        print(f"  Levels:         {state.starting_level} → {state.highest_level_reached}")
        print(f"{'='*60}")

    def on_persisted(ok):
        if ok:
            print_leaderboard(game.database, 5)
        app.quit()

    def on_persist_failed(msg):
        print(f"\n❌ Score not saved: {msg}")

    controller.subscribe(on_state)
    controller.countdown_ticked.connect(on_countdown)
    controller.final_countdown.connect(on_final)
    controller.session_ended.connect(on_ended)
    controller.persistence_finished.connect(on_persisted)
    controller.persistence_failed.connect(on_persist_failed)
    player.tapped.connect(on_tap)

    def shutdown():
        player.stop()
        player.wait(3000)
        controller.shutdown()
        game.database.close()

    # Handle Ctrl+C gracefully
    def signal_handler(sig, frame):
        print("\n\nShutting down...")
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)

    try:
        controller.start_session(level)
    except InvalidLevelError as e:
        print(f"\n❌ {e}")
        print(f"   Unlocked levels: {controller.unlocked_levels()}")
        shutdown()
        sys.exit(2)

    print(
        f"\n🔨 Whack-a-Mole: {game.settings.player_name} at level {level} "
        f"({args.duration} ticks, preset={args.preset})\n"
    )
    player.start()

    # Keep the event loop waking up so Ctrl+C is noticed
    timer = QTimer()
    timer.timeout.connect(lambda: None)
    timer.start(100)

    code = app.exec()
    shutdown()
    sys.exit(code)


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(
        description="Whack-a-Mole session runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--level", type=int, default=None,
        help="Starting level (default: saved starting level)",
    )
    parser.add_argument(
        "--duration", type=int, default=SESSION_DURATION,
        help=f"Session length in clock ticks (default: {SESSION_DURATION})",
    )
    parser.add_argument(
        "--tick", type=float, default=TICK_SECONDS,
        help=f"Seconds per clock tick (default: {TICK_SECONDS})",
    )
    parser.add_argument(
        "--player", type=str, default=None,
        help="Player name (saved to settings)",
    )
    parser.add_argument(
        "--preset", type=str, default="casual", choices=sorted(PRESETS),
        help="Simulated player preset (default: casual)",
    )
    parser.add_argument(
        "--show-grid", action="store_true",
        help="Print the grid every time the mole moves",
    )

    # Storage
    parser.add_argument(
        "--db", type=Path, default=None,
        help="SQLite database path (default: ~/.whackamole/whackamole.db)",
    )
    parser.add_argument(
        "--settings", type=Path, default=None,
        help="Settings file path (default: ~/.whackamole/settings.json)",
    )

    # One-shot commands
    parser.add_argument(
        "--leaderboard", action="store_true",
        help="Print the top scores and exit",
    )
    parser.add_argument(
        "--players", action="store_true",
        help="Print lifetime stats per player and exit",
    )
    parser.add_argument(
        "--clear-scores", action="store_true",
        help="Delete all scores, keep player stats, and exit",
    )
    parser.add_argument(
        "--clear-data", action="store_true",
        help="Delete all scores and player stats and exit",
    )

    # Verbosity
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.leaderboard or args.players or args.clear_scores or args.clear_data:
        database = Database(db_path=args.db)
        try:
            if args.clear_data:
                database.clear_all_data()
                print("All scores and player stats deleted.")
            elif args.clear_scores:
                database.delete_all_scores()
                print("All scores deleted.")
            if args.leaderboard:
                print_leaderboard(database)
            if args.players:
                print_players(database)
        finally:
            database.close()
        return

    run_cli(args)


if __name__ == "__main__":
    main()
