"""
Game constants for Whack-a-Mole.

Grid layout, session timing, the difficulty scaling law, scoring,
and the best-score thresholds that unlock harder starting levels.
"""

# =============================================================================
# Grid & Session
# =============================================================================

GRID_ROWS = 3
GRID_COLS = 3
GRID_SIZE = GRID_ROWS * GRID_COLS  # 9 holes

NO_TARGET = -1                 # activeTargetIndex when no mole is visible

SESSION_DURATION = 30          # clock ticks per session
TICK_SECONDS = 1.0             # real-time length of one clock tick
COUNTDOWN_TICKS = 3            # "3, 2, 1" before the session goes live
FINAL_COUNTDOWN_THRESHOLD = 3  # last N ticks raise the final countdown cue

# =============================================================================
# Difficulty Scaling
# =============================================================================

DECAY_RATE = 0.90              # each level is 10% faster
BASE_VISIBLE_MS = 1300         # level 1 mole visible duration
VISIBLE_FLOOR_MS = 300
BASE_GAP_MS = 300              # level 1 pause between moles
GAP_FLOOR_MS = 100

# =============================================================================
# Scoring
# =============================================================================

BASE_HIT_POINTS = 10
PER_LEVEL_POINT_BONUS = 2
COMBO_BONUS = 5                # extra points per consecutive hit after the first
HITS_PER_LEVEL = 5

# =============================================================================
# Starting Level Unlocks
# =============================================================================

# (best score required, starting level unlocked)
LEVEL_UNLOCKS = [
    (0, 1),      # always unlocked
    (1000, 3),
    (1700, 5),
]

# =============================================================================
# Leaderboard
# =============================================================================

LEADERBOARD_SIZE = 10
DEFAULT_PLAYER_NAME = "Player"
