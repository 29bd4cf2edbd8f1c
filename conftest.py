"""
Shared pytest fixtures.

Runs Qt headless and gives each test its own database, settings file
and a fast session timing.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from whackamole.database.db import Database
from whackamole.models.session import SessionTiming
from whackamole.session_controller import SessionController
from whackamole.utils.config import Settings


@pytest.fixture
def database(tmp_path):
    db = Database(db_path=tmp_path / "whackamole.db")
    yield db
    db.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(path=tmp_path / "settings.json")


@pytest.fixture
def fast_timing():
    """20ms ticks; mole timings left long so taps in tests are not racing the scheduler."""
    return SessionTiming(tick_seconds=0.02, countdown_ticks=3, duration=30, spawn_time_scale=1.0)


@pytest.fixture
def make_controller(qtbot, database, settings, fast_timing):
    """Factory for controllers that are shut down after the test."""
    created = []

    def _make(**kwargs):
        kwargs.setdefault("gateway", database)
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("timing", fast_timing)
        controller = SessionController(**kwargs)
        created.append(controller)
        return controller

    yield _make

    for controller in created:
        controller.shutdown()
