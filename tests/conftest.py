"""Shared fixtures for barstream tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from barstream.models.observation import Observation


BASE = datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)


def obs(seconds: float, price: float, volume: float = 100.0) -> Observation:
    """Observation ``seconds`` after 09:30 UTC."""
    return Observation(BASE + timedelta(seconds=seconds), price, volume)


@pytest.fixture
def base_time() -> datetime:
    return BASE


@pytest.fixture
def minute_ticks() -> list[Observation]:
    """Three ticks inside the 09:30 minute."""
    return [
        obs(0, 100.0, 1000.0),
        obs(30, 105.0, 800.0),
        obs(45, 98.0, 1200.0),
    ]


@pytest.fixture
def volume_ticks() -> list[Observation]:
    """900 volume in three ticks, one short of a 1000-volume bar."""
    return [
        obs(0, 100.0, 400.0),
        obs(5, 102.0, 300.0),
        obs(10, 99.0, 200.0),
    ]
