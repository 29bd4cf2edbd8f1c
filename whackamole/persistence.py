"""
Background score submission.

When a session ends, its ScoreRecord and the player's stat delta are
written on a worker thread so the end-of-session transition never waits
on the database. A failed write is logged and reported; it never
reaches the session lifecycle.
"""

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QThread

from whackamole.models.score import ScoreRecord

logger = logging.getLogger(__name__)


class ScoreSubmitter(QThread):
    """Writes one finished session to the persistence gateway.

    `on_done(ok, error)` is called from the worker thread once the
    writes have completed or failed.
    """

    def __init__(
        self,
        gateway,
        record: ScoreRecord,
        on_done: Optional[Callable[[bool, str], None]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._gateway = gateway
        self._record = record
        self._on_done = on_done
        self.ok: Optional[bool] = None

    def run(self):
        record = self._record
        error = ""
        try:
            self._gateway.insert_score_record(record)
            self._gateway.upsert_player_aggregate(
                record.player_name, record.score, record.hits, record.misses,
            )
            self.ok = True
        except Exception as e:
            logger.error(
                f"Failed to save score for {record.player_name}: {e}",
                exc_info=True,
            )
            self.ok = False
            error = str(e)

        if self._on_done:
            self._on_done(self.ok, error)
