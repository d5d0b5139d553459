import json
from datetime import date

import pytest

from core.database import MemoryBackend, StorageGateway
from core.tracker import HabitTracker

# Среда, 13 марта 2024
FIXED_TODAY = date(2024, 3, 13)


def stored_state(habits, tracking_data, current_week_start="2024-03-11T00:00:00"):
    """JSON записи трекера в формате хранилища"""
    return json.dumps({
        "habits": habits,
        "trackingData": tracking_data,
        "currentWeekStart": current_week_start
    })


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def gateway(memory_backend):
    return StorageGateway(memory_backend, tz_name="UTC")


@pytest.fixture
def tracker(gateway):
    tracker = HabitTracker(gateway, clock=lambda: FIXED_TODAY)
    tracker.load()
    return tracker
