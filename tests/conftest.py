"""Shared test fixtures."""

from __future__ import annotations

import os
from datetime import datetime

import pytest

from live_better.core.config import get_config
from live_better.core.scheduler import ManualScheduler
from live_better.focus.timer import TimerEngine


class FixedClock:
    """Wall clock whose hour can be moved by tests."""

    def __init__(self, hour: int = 12):
        self.hour = hour

    def __call__(self) -> datetime:
        return datetime(2024, 6, 3, self.hour, 0, 0)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def engine(scheduler) -> TimerEngine:
    """A one-minute focus / two-minute break timer on a manual clock."""
    return TimerEngine(focus_minutes=1, break_minutes=2, scheduler=scheduler)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at a temp dir and drop the cached config."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in list(os.environ):
        if name.startswith("LIVE_BETTER_"):
            monkeypatch.delenv(name)
    get_config.cache_clear()
    yield tmp_path
    get_config.cache_clear()
