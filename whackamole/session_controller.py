"""
Session controller for Whack-a-Mole.

Owns the single SessionState of a game and the lifecycle around it:

    IDLE -> COUNTDOWN -> ACTIVE -> ENDED -> (IDLE on reset | COUNTDOWN on replay)

Three worker threads act on the state while a session runs: the
countdown timer, then the spawn scheduler and the session clock side by
side. Taps arrive on the caller's thread. Every read-modify-write of the
state happens under one QMutex, and every worker call carries the
session generation it was started for; once a session ends or is reset
the generation moves on and late calls from its workers are no-ops.

Usage:
    controller = SessionController(gateway=db, settings=settings)
    controller.subscribe(on_state)
    controller.start_session(level=1)
    controller.tap_hole(4)
"""

import logging
import random
import sqlite3
from typing import Callable, Iterable, Optional

from PyQt6.QtCore import QMutex, QMutexLocker, QObject, QThread, pyqtSignal

from whackamole.difficulty import difficulty_label, unlocked_starting_levels
from whackamole.models.score import ScoreRecord
from whackamole.models.session import SessionPhase, SessionState, SessionTiming, TapResult
from whackamole.persistence import ScoreSubmitter
from whackamole.scoring import resolve_tap
from whackamole.session_clock import CountdownTimer, SessionClock
from whackamole.spawn_scheduler import SpawnScheduler
from whackamole.utils.constants import (
    DEFAULT_PLAYER_NAME,
    FINAL_COUNTDOWN_THRESHOLD,
    GRID_SIZE,
    HITS_PER_LEVEL,
    NO_TARGET,
)

logger = logging.getLogger(__name__)

WORKER_JOIN_TIMEOUT_MS = 2000


class InvalidLevelError(ValueError):
    """Requested starting level is not among the unlocked levels."""


class SessionActiveError(RuntimeError):
    """A session is already counting down or running."""


class SessionController(QObject):
    """Runs one session at a time and publishes its state.

    Signals:
        state_changed(SessionState): Emitted with a fresh snapshot after every change.
        countdown_ticked(int): Pre-game countdown cue (3, 2, 1).
        final_countdown(int): Final-seconds cue with the ticks remaining.
        tap_resolved(TapResult): Outcome of each counted tap.
        session_ended(SessionState): Final snapshot when the clock runs out
                                     or the session is ended explicitly.
        persistence_finished(bool): Background score write completed (ok flag).
        persistence_failed(str): Background score write failed.
    """

    state_changed = pyqtSignal(object)
    countdown_ticked = pyqtSignal(int)
    final_countdown = pyqtSignal(int)
    tap_resolved = pyqtSignal(object)
    session_ended = pyqtSignal(object)
    persistence_finished = pyqtSignal(bool)
    persistence_failed = pyqtSignal(str)

    def __init__(
        self,
        gateway=None,
        settings=None,
        timing: Optional[SessionTiming] = None,
        grid_size: int = GRID_SIZE,
        hits_per_level: int = HITS_PER_LEVEL,
        rng: Optional[random.Random] = None,
        parent=None,
    ):
        """
        Args:
            gateway: Persistence gateway (see whackamole.database.db.Database).
                     None disables score saving.
            settings: Settings store for the player name and starting level.
            timing: Session pacing; defaults to real time.
            grid_size: Number of holes.
            hits_per_level: Hits needed to advance a level.
            rng: Random source handed to the spawn scheduler.
        """
        super().__init__(parent)
        self._gateway = gateway
        self._settings = settings
        self._timing = timing or SessionTiming()
        self._grid_size = grid_size
        self._hits_per_level = hits_per_level
        self._rng = rng or random.Random()

        self._mutex = QMutex()
        self._state = SessionState.fresh(duration=self._timing.duration)
        self._generation = 0

        self._countdown: Optional[CountdownTimer] = None
        self._scheduler: Optional[SpawnScheduler] = None
        self._clock: Optional[SessionClock] = None
        self._retired: list = []
        self._submitters: list[ScoreSubmitter] = []

    # =========================================================================
    # Observation
    # =========================================================================

    def snapshot(self) -> SessionState:
        """Current state. Snapshots are immutable."""
        with QMutexLocker(self._mutex):
            return self._state

    @property
    def generation(self) -> int:
        with QMutexLocker(self._mutex):
            return self._generation

    @property
    def timing(self) -> SessionTiming:
        return self._timing

    @property
    def grid_size(self) -> int:
        return self._grid_size

    def subscribe(self, callback: Callable[[SessionState], None]):
        """Register for state snapshots; the current one is delivered immediately."""
        self.state_changed.connect(callback)
        callback(self.snapshot())

    def unsubscribe(self, callback: Callable[[SessionState], None]):
        try:
            self.state_changed.disconnect(callback)
        except TypeError:
            logger.debug("unsubscribe: callback was not subscribed")

    def _publish(self):
        self.state_changed.emit(self.snapshot())

    def _is_live(self, generation: int, phase: SessionPhase = SessionPhase.ACTIVE) -> bool:
        # Caller holds the mutex
        return generation == self._generation and self._state.phase is phase

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def unlocked_levels(self) -> list[int]:
        """Starting levels unlocked by the best score on record."""
        best = 0
        if self._gateway is not None:
            try:
                best = self._gateway.get_overall_best_score()
            except sqlite3.Error as e:
                logger.warning(f"Could not read best score, only level 1 unlocked: {e}")
        return unlocked_starting_levels(best)

    def start_session(self, level: int, unlocked_levels: Optional[Iterable[int]] = None):
        """Reset counters and begin the countdown at the given starting level.

        Valid from IDLE or ENDED. A rejected start leaves the current state,
        including a finished session's final snapshot, untouched.

        Raises:
            SessionActiveError: A session is counting down or running.
            InvalidLevelError: `level` is not in `unlocked_levels` (derived
                               from the best score when not given).
        """
        if unlocked_levels is None:
            unlocked_levels = self.unlocked_levels()
        unlocked = set(unlocked_levels)

        self._join_retired()

        with QMutexLocker(self._mutex):
            phase = self._state.phase
            if phase in (SessionPhase.COUNTDOWN, SessionPhase.ACTIVE):
                logger.warning(f"start_session rejected: session is {phase.value}")
                raise SessionActiveError(f"Session already {phase.value}")
            if level not in unlocked:
                logger.warning(
                    f"start_session rejected: level {level} not unlocked "
                    f"(unlocked={sorted(unlocked)})"
                )
                raise InvalidLevelError(
                    f"Level {level} is not unlocked; choose one of {sorted(unlocked)}"
                )

            self._generation += 1
            generation = self._generation
            self._state = SessionState.fresh(
                level=level,
                duration=self._timing.duration,
                phase=SessionPhase.COUNTDOWN,
            )
            countdown = CountdownTimer(self, generation, self._timing)
            self._countdown = countdown

        logger.info(f"Session {generation} starting at level {level}")
        self._publish()
        countdown.start()

        if self._settings is not None and self._settings.starting_level != level:
            self._settings.set_starting_level(level)

    def countdown_tick(self, generation: int, remaining: int) -> bool:
        """Called by the countdown timer once per tick. False once cancelled."""
        with QMutexLocker(self._mutex):
            if not self._is_live(generation, SessionPhase.COUNTDOWN):
                return False
        logger.debug(f"Countdown: {remaining}")
        self.countdown_ticked.emit(remaining)
        return True

    def begin_active(self, generation: int) -> bool:
        """Countdown finished: go Active and start the spawn loop and the clock."""
        with QMutexLocker(self._mutex):
            if not self._is_live(generation, SessionPhase.COUNTDOWN):
                return False
            self._state = self._state.evolve(phase=SessionPhase.ACTIVE)
            scheduler = SpawnScheduler(
                self, generation, self._timing,
                grid_size=self._grid_size, rng=self._rng,
            )
            clock = SessionClock(self, generation, self._timing)
            self._scheduler = scheduler
            self._clock = clock
            self._retire(self._countdown)
            self._countdown = None

        logger.info(f"Session {generation} active ({self._timing.duration} ticks)")
        self._publish()
        scheduler.start()
        clock.start()
        return True

    def end_session(self, generation: Optional[int] = None) -> bool:
        """Stop both loops, move to ENDED and submit the score in the background.

        Called by the UI to quit early; running out of time ends the session
        inside `tick_clock`. Returns False if there was no running session
        to end.
        """
        with QMutexLocker(self._mutex):
            if self._state.phase is not SessionPhase.ACTIVE:
                return False
            if generation is not None and generation != self._generation:
                return False
            final, workers = self._end_locked()

        self._finish_end(final, workers)
        return True

    def _end_locked(self):
        # Caller holds the mutex and has checked the session is Active
        self._generation += 1
        self._state = self._state.evolve(
            phase=SessionPhase.ENDED,
            active_target_index=NO_TARGET,
            final_countdown=False,
        )
        return self._state, self._take_workers()

    def _finish_end(self, final: SessionState, workers: list):
        for worker in workers:
            worker.stop()

        logger.info(
            f"Session ended: score={final.score} hits={final.hits} "
            f"misses={final.misses} highest={difficulty_label(final.highest_level_reached)}"
        )
        self._publish()
        self.session_ended.emit(final)
        self._submit(final)

    def reset_session(self):
        """Cancel any running loops and return to IDLE with zeroed counters."""
        with QMutexLocker(self._mutex):
            self._generation += 1
            self._state = SessionState.fresh(duration=self._timing.duration)
            workers = self._take_workers()

        for worker in workers:
            worker.stop()
        self._join_retired()

        logger.info("Session reset")
        self._publish()

    def shutdown(self, timeout_ms: int = WORKER_JOIN_TIMEOUT_MS):
        """Reset and wait for outstanding score writes. Call before exit."""
        self.reset_session()
        self.wait_for_persistence(timeout_ms)

    def _take_workers(self) -> list:
        # Caller holds the mutex
        workers = [w for w in (self._countdown, self._scheduler, self._clock) if w]
        self._countdown = self._scheduler = self._clock = None
        for worker in workers:
            self._retire(worker)
        return workers

    def _retire(self, worker):
        # Caller holds the mutex; keeps the QThread alive until it has finished
        if worker is not None:
            self._retired.append(worker)

    def _join_retired(self, timeout_ms: int = WORKER_JOIN_TIMEOUT_MS):
        with QMutexLocker(self._mutex):
            retired = list(self._retired)

        current = QThread.currentThread()
        for worker in retired:
            if worker is not current:
                worker.wait(timeout_ms)

        with QMutexLocker(self._mutex):
            self._retired = [w for w in self._retired if not w.isFinished()]

    # =========================================================================
    # Worker entry points
    # =========================================================================

    def spawn_target(self, generation: int, chooser: Callable[[int], int]) -> Optional[int]:
        """Publish a new mole. `chooser` gets the current target and returns a hole.

        Returns the chosen hole, or None when the session is no longer live.
        """
        with QMutexLocker(self._mutex):
            if not self._is_live(generation):
                return None
            cell = chooser(self._state.active_target_index)
            self._state = self._state.evolve(active_target_index=cell)

        logger.debug(f"Mole up at hole {cell}")
        self._publish()
        return cell

    def hide_target(self, generation: int, cell: int) -> bool:
        """Compare-and-clear: hide the mole only if `cell` is still the active target.

        A no-op when the mole was already hit or replaced, or when the
        session is no longer live. Returns True if the target was cleared.
        """
        with QMutexLocker(self._mutex):
            if not self._is_live(generation):
                return False
            if self._state.active_target_index != cell:
                return False
            self._state = self._state.evolve(active_target_index=NO_TARGET)

        self._publish()
        return True

    def tick_clock(self, generation: int) -> Optional[int]:
        """Advance the clock by one tick. Returns the time remaining, or None once cancelled.

        The tick that reaches zero ends the session in the same step, so no
        tap or spawn can land after time has run out.
        """
        ended = None
        with QMutexLocker(self._mutex):
            if not self._is_live(generation):
                return None
            remaining = max(0, self._state.time_remaining - 1)
            final = 0 < remaining <= FINAL_COUNTDOWN_THRESHOLD
            self._state = self._state.evolve(
                time_remaining=remaining,
                final_countdown=final,
            )
            if remaining == 0:
                ended = self._end_locked()

        if ended is not None:
            self._finish_end(*ended)
            return remaining

        self._publish()
        if final:
            self.final_countdown.emit(remaining)
        return remaining

    # =========================================================================
    # Input
    # =========================================================================

    def tap_hole(self, index: int) -> TapResult:
        """Resolve a tap on hole `index`.

        Outside the Active phase the tap is ignored and reported as a miss
        without being counted.
        """
        with QMutexLocker(self._mutex):
            if self._state.phase is not SessionPhase.ACTIVE:
                return TapResult.MISS
            previous_level = self._state.level
            self._state, result = resolve_tap(self._state, index, self._hits_per_level)
            state = self._state

        if state.level != previous_level:
            logger.info(f"Level up: {previous_level} -> {state.level}")
        logger.debug(
            f"Tap hole {index}: {result.value} (score={state.score}, combo={state.combo})"
        )
        self._publish()
        self.tap_resolved.emit(result)
        return result

    # =========================================================================
    # Persistence
    # =========================================================================

    def _player_name(self) -> str:
        if self._settings is None:
            return DEFAULT_PLAYER_NAME
        return self._settings.player_name

    def _submit(self, final: SessionState):
        if self._gateway is None:
            return

        record = ScoreRecord(
            player_name=self._player_name(),
            score=final.score,
            difficulty=difficulty_label(final.highest_level_reached),
            hits=final.hits,
            misses=final.misses,
        )
        submitter = ScoreSubmitter(self._gateway, record, on_done=self._on_persisted)
        with QMutexLocker(self._mutex):
            self._submitters = [s for s in self._submitters if not s.isFinished()]
            self._submitters.append(submitter)
        submitter.start()

    def _on_persisted(self, ok: bool, error: str):
        if not ok:
            self.persistence_failed.emit(error)
        self.persistence_finished.emit(ok)

    def wait_for_persistence(self, timeout_ms: int = WORKER_JOIN_TIMEOUT_MS) -> bool:
        """Block until pending score writes finish. Returns False on timeout."""
        with QMutexLocker(self._mutex):
            pending = list(self._submitters)
        return all(s.wait(timeout_ms) for s in pending)
