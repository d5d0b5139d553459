from datetime import date

import pytest

from core.database import (
    BackendUnavailableError, MemoryBackend, StorageBackend, StorageGateway, StorageStatus,
    DEFAULT_DATA_KEY
)
from core.models import AppConfig, ValidationError
from core.tracker import HabitTracker
from tests.conftest import FIXED_TODAY, stored_state


@pytest.fixture
def loaded_tracker():
    """Трекер с одной привычкой '1' и парой отметок"""
    backend = MemoryBackend({
        DEFAULT_DATA_KEY: stored_state(
            [{"id": "1", "name": "Read", "createdAt": "2024-03-01T09:00:00"}],
            {"1": {"2024-03-01": True, "2024-03-02": False}}
        )
    })
    tracker = HabitTracker(StorageGateway(backend, tz_name="UTC"), clock=lambda: FIXED_TODAY)
    tracker.load()
    return tracker


def test_load_defaults_when_nothing_stored(tracker):
    assert tracker.habits == []
    assert tracker.tracking_data == {}
    assert tracker.current_week_start == date(2024, 3, 11)


def test_load_stored_state(loaded_tracker):
    assert [h.name for h in loaded_tracker.habits] == ["Read"]
    assert loaded_tracker.is_completed("1", "2024-03-01")
    assert not loaded_tracker.is_completed("1", date(2024, 3, 2))


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_blank_habit_is_ignored(tracker, memory_backend, name):
    saves_before = memory_backend.save_count

    assert tracker.add_habit(name) is None
    assert tracker.habits == []
    assert memory_backend.save_count == saves_before


def test_add_habit(tracker, gateway):
    habit = tracker.add_habit("  Drink water ")

    assert habit.name == "Drink water"
    assert tracker.habits == [habit]
    assert tracker.tracking_data == {habit.id: {}}
    assert [h.name for h in gateway.load().habits] == ["Drink water"]


def test_habits_keep_insertion_order(tracker):
    names = ["Read", "Run", "Meditate"]
    for name in names:
        tracker.add_habit(name)
    assert [h.name for h in tracker.habits] == names


def test_delete_habit_removes_tracking(loaded_tracker):
    assert loaded_tracker.delete_habit("1") is True
    assert loaded_tracker.habits == []
    assert loaded_tracker.tracking_data == {}

    stored = loaded_tracker.gateway.load()
    assert stored.habits == []
    assert stored.tracking_data == {}


def test_delete_unknown_habit_is_noop(loaded_tracker):
    saves_before = loaded_tracker.gateway.local.save_count
    assert loaded_tracker.delete_habit("missing") is False
    assert len(loaded_tracker.habits) == 1
    assert loaded_tracker.gateway.local.save_count == saves_before


def test_toggle_twice_restores_value(loaded_tracker):
    for key in ("2024-03-01", "2024-03-02", "2024-03-05"):
        original = loaded_tracker.is_completed("1", key)
        loaded_tracker.toggle("1", key)
        loaded_tracker.toggle("1", key)
        assert loaded_tracker.is_completed("1", key) == original


def test_first_toggle_marks_done_and_persists(tracker, gateway):
    habit = tracker.add_habit("Read")

    assert tracker.toggle(habit.id, date(2024, 3, 13)) is True
    assert gateway.load().tracking_data[habit.id] == {"2024-03-13": True}
    assert tracker.toggle(habit.id, "2024-03-13") is False


def test_toggle_creates_missing_tracking_entry(tracker):
    habit = tracker.add_habit("Read")
    del tracker.tracking_data[habit.id]

    assert tracker.toggle(habit.id, "2024-03-13") is True
    assert tracker.tracking_data[habit.id] == {"2024-03-13": True}


def test_toggle_unknown_habit_is_noop(tracker, memory_backend):
    saves_before = memory_backend.save_count
    assert tracker.toggle("missing", "2024-03-13") is False
    assert tracker.tracking_data == {}
    assert memory_backend.save_count == saves_before


def test_navigate_week(tracker, gateway):
    assert tracker.navigate_week(1) == date(2024, 3, 18)
    assert tracker.navigate_week(-1) == date(2024, 3, 11)
    assert tracker.navigate_week(-1) == date(2024, 3, 4)
    assert gateway.load().current_week_start == date(2024, 3, 4)


def test_navigate_week_realigns_to_monday(tracker):
    tracker.state.current_week_start = date(2024, 3, 13)
    assert tracker.navigate_week(1) == date(2024, 3, 18)


@pytest.mark.parametrize("direction", [0, 2, -7])
def test_navigate_week_rejects_other_directions(tracker, direction):
    with pytest.raises(ValidationError):
        tracker.navigate_week(direction)


def test_go_to_current_week(tracker):
    tracker.navigate_week(1)
    tracker.navigate_week(1)
    assert tracker.go_to_current_week() == date(2024, 3, 11)


def test_week_navigation_does_not_touch_tracking(loaded_tracker):
    before = loaded_tracker.snapshot().to_dict()["trackingData"]
    loaded_tracker.navigate_week(1)
    assert loaded_tracker.tracking_data == before


def test_listeners_are_notified(tracker):
    calls = []
    listener = lambda t: calls.append(len(t.habits))

    tracker.subscribe(listener)
    habit = tracker.add_habit("Read")
    tracker.toggle(habit.id, "2024-03-13")
    tracker.unsubscribe(listener)
    tracker.delete_habit(habit.id)

    assert calls == [1, 1]


def test_failing_listener_does_not_break_mutation(tracker):
    def broken(t):
        raise RuntimeError("render failed")

    tracker.subscribe(broken)
    assert tracker.add_habit("Read") is not None
    assert len(tracker.habits) == 1


def test_snapshot_is_independent(loaded_tracker):
    snapshot = loaded_tracker.snapshot()
    loaded_tracker.toggle("1", "2024-03-05")
    assert "2024-03-05" not in snapshot.tracking_data["1"]


class UnavailableBackend(StorageBackend):
    name = "google_sheets"

    def load(self, key):
        raise BackendUnavailableError("нет сети")

    def save(self, key, data):
        raise BackendUnavailableError("нет сети")


def test_degraded_save_is_visible(memory_backend):
    gateway = StorageGateway(memory_backend, remote_factory=lambda sheet_id: UnavailableBackend(),
                             config=AppConfig(use_remote_backend=True, remote_sheet_id="X"))
    tracker = HabitTracker(gateway, clock=lambda: FIXED_TODAY)
    tracker.load()

    tracker.add_habit("Read")
    assert tracker.last_result.status == StorageStatus.DEGRADED


def test_configure_storage_moves_state_to_empty_remote(loaded_tracker):
    remote = MemoryBackend()
    loaded_tracker.gateway.remote_factory = lambda sheet_id: remote

    config = loaded_tracker.configure_storage(use_remote_backend=True, remote_sheet_id="X")

    assert config.remote_enabled
    assert [h.name for h in loaded_tracker.habits] == ["Read"]
    assert DEFAULT_DATA_KEY in remote.records


def test_configure_storage_loads_existing_remote_state(loaded_tracker):
    remote = MemoryBackend({DEFAULT_DATA_KEY: stored_state([{"id": "9", "name": "Run"}], {})})
    loaded_tracker.gateway.remote_factory = lambda sheet_id: remote

    loaded_tracker.configure_storage(use_remote_backend=True, remote_sheet_id="X")

    assert [h.id for h in loaded_tracker.habits] == ["9"]
    assert loaded_tracker.tracking_data == {"9": {}}
