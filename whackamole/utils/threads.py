"""
Cancellable loop thread base for the session workers.

Each worker runs on its own QThread and suspends only through
`_sleep`, which returns early as soon as `stop()` is called.
"""

import threading

from PyQt6.QtCore import QThread


class LoopThread(QThread):
    """QThread with a stop flag and an interruptible sleep."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._running = True
        self._stop_event = threading.Event()

    def _sleep(self, seconds: float) -> bool:
        """Suspend for `seconds`. Returns False if stopped meanwhile."""
        if seconds > 0:
            self._stop_event.wait(seconds)
        return self._running

    def stop(self):
        """Signal the thread to stop. Does not block."""
        self._running = False
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return not self._running
