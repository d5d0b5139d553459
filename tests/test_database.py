import json
from datetime import date

import pytest

from core.database import (
    BackendUnavailableError, LocalJSONBackend, MemoryBackend, StorageBackend,
    StorageGateway, StorageStatus, DEFAULT_CONFIG_KEY, DEFAULT_DATA_KEY
)
from core.models import AppConfig, AppState, Habit
from tests.conftest import stored_state


class UnavailableBackend(StorageBackend):
    name = "google_sheets"

    def load(self, key):
        raise BackendUnavailableError("нет сети")

    def save(self, key, data):
        raise BackendUnavailableError("нет сети")


def make_state():
    return AppState(
        habits=[Habit(id="1", name="Read")],
        tracking_data={"1": {"2024-03-01": True}},
        current_week_start=date(2024, 2, 26)
    )


def test_load_returns_none_when_nothing_stored(gateway):
    assert gateway.load() is None
    assert gateway.last_result.status == StorageStatus.OK


def test_save_then_load(gateway):
    result = gateway.save(make_state())
    assert result.ok
    assert result.backend == "memory"

    loaded = gateway.load()
    assert [h.id for h in loaded.habits] == ["1"]
    assert loaded.tracking_data == {"1": {"2024-03-01": True}}
    assert loaded.current_week_start == date(2024, 2, 26)


@pytest.mark.parametrize("raw", [
    "{not json",
    json.dumps({"habits": "Read"}),
    json.dumps(["habits"]),
])
def test_malformed_payload_is_treated_as_absent(raw):
    gateway = StorageGateway(MemoryBackend({DEFAULT_DATA_KEY: raw}))
    assert gateway.load() is None


def test_local_backend_writes_one_file_per_key(tmp_path):
    gateway = StorageGateway(LocalJSONBackend(tmp_path))
    gateway.save(make_state())
    gateway.save_config(use_remote_backend=False)

    assert json.loads((tmp_path / f"{DEFAULT_DATA_KEY}.json").read_text("utf-8"))["habits"][0]["name"] == "Read"
    assert (tmp_path / f"{DEFAULT_CONFIG_KEY}.json").exists()
    assert not list(tmp_path.glob("*.tmp"))

    assert StorageGateway(LocalJSONBackend(tmp_path)).load().habits[0].name == "Read"


def test_local_backend_corrupted_file(tmp_path):
    (tmp_path / f"{DEFAULT_DATA_KEY}.json").write_text("{broken", encoding="utf-8")
    assert StorageGateway(LocalJSONBackend(tmp_path)).load() is None


def test_local_backend_write_failure_is_reported(tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("file, not a directory", encoding="utf-8")

    gateway = StorageGateway(LocalJSONBackend(blocked))
    result = gateway.save(make_state())

    assert result.status == StorageStatus.FAILED
    assert result.error
    assert gateway.last_result is result


def test_save_config_merges_with_stored_record(memory_backend):
    StorageGateway(memory_backend).save_config(use_remote_backend=True)
    StorageGateway(memory_backend).save_config(remote_sheet_id="X")

    config = StorageGateway(memory_backend).load_config()
    assert config.use_remote_backend is True
    assert config.remote_sheet_id == "X"


def test_save_config_keeps_reserved_fields(memory_backend):
    memory_backend.save(DEFAULT_CONFIG_KEY, {"useRemoteBackend": False, "apiKey": "k"})
    StorageGateway(memory_backend).save_config(remote_sheet_id="X")
    assert json.loads(memory_backend.records[DEFAULT_CONFIG_KEY])["apiKey"] == "k"


def test_corrupted_config_falls_back_to_defaults():
    gateway = StorageGateway(MemoryBackend({DEFAULT_CONFIG_KEY: "{broken"}))
    assert gateway.config == AppConfig()


def test_remote_without_sheet_id_uses_local(memory_backend):
    calls = []

    def factory(sheet_id):
        calls.append(sheet_id)
        return MemoryBackend()

    gateway = StorageGateway(memory_backend, remote_factory=factory,
                             config=AppConfig(use_remote_backend=True))
    result = gateway.save(make_state())

    assert result.ok
    assert result.backend == "memory"
    assert calls == []
    assert DEFAULT_DATA_KEY in memory_backend.records


def test_remote_backend_is_used_when_configured(memory_backend):
    remote = MemoryBackend()
    remote.name = "google_sheets"
    gateway = StorageGateway(memory_backend, remote_factory=lambda sheet_id: remote,
                             remote_name="google_sheets",
                             config=AppConfig(use_remote_backend=True, remote_sheet_id="X"))

    result = gateway.save(make_state())

    assert result.ok
    assert result.backend == "google_sheets"
    assert gateway.active_backend_name == "google_sheets"
    assert DEFAULT_DATA_KEY in remote.records
    assert DEFAULT_DATA_KEY not in memory_backend.records
    assert gateway.load().habits[0].name == "Read"


def test_unavailable_remote_degrades_to_local(memory_backend):
    gateway = StorageGateway(memory_backend, remote_factory=lambda sheet_id: UnavailableBackend(),
                             config=AppConfig(use_remote_backend=True, remote_sheet_id="X"))

    result = gateway.save(make_state())
    assert result.status == StorageStatus.DEGRADED
    assert result.backend == "memory"
    assert "нет сети" in result.error
    assert DEFAULT_DATA_KEY in memory_backend.records

    assert gateway.load().habits[0].name == "Read"
    assert gateway.last_result.status == StorageStatus.DEGRADED


def test_remote_factory_failure_degrades_to_local(memory_backend):
    def factory(sheet_id):
        raise BackendUnavailableError("нет учётных данных")

    gateway = StorageGateway(memory_backend, remote_factory=factory,
                             config=AppConfig(use_remote_backend=True, remote_sheet_id="X"))
    assert gateway.save(make_state()).status == StorageStatus.DEGRADED


def test_switching_sheet_id_recreates_remote(memory_backend):
    created = []

    def factory(sheet_id):
        created.append(sheet_id)
        return MemoryBackend()

    gateway = StorageGateway(memory_backend, remote_factory=factory)
    gateway.save_config(use_remote_backend=True, remote_sheet_id="A")
    gateway.save(make_state())
    gateway.save(make_state())
    gateway.save_config(remote_sheet_id="B")
    gateway.save(make_state())

    assert created == ["A", "B"]


def test_stored_state_helper_is_loadable():
    gateway = StorageGateway(MemoryBackend({
        DEFAULT_DATA_KEY: stored_state([{"id": "1", "name": "Read"}], {})
    }))
    assert gateway.load().tracking_data == {"1": {}}


@pytest.mark.parametrize("raw_week", [123, ["2024-03-04"], {"date": "2024-03-04"}])
def test_non_string_week_start_does_not_break_load(raw_week):
    raw = json.dumps({"habits": [{"id": "1", "name": "Read"}], "trackingData": {}, "currentWeekStart": raw_week})
    gateway = StorageGateway(MemoryBackend({DEFAULT_DATA_KEY: raw}))

    state = gateway.load()

    assert [h.id for h in state.habits] == ["1"]
    assert state.current_week_start.weekday() == 0


def test_local_backend_invalid_utf8_is_treated_as_absent(tmp_path):
    (tmp_path / f"{DEFAULT_DATA_KEY}.json").write_bytes(b'{"habits": "\xff\xfe"}')

    gateway = StorageGateway(LocalJSONBackend(tmp_path))

    assert gateway.load() is None
    assert gateway.last_result.error


def test_save_config_reports_ok(memory_backend):
    gateway = StorageGateway(memory_backend)
    assert gateway.config_result is None

    gateway.save_config(remote_sheet_id="X")

    assert gateway.config_result.ok


def test_save_config_write_failure_is_reported(tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("file, not a directory", encoding="utf-8")
    gateway = StorageGateway(LocalJSONBackend(blocked))

    config = gateway.save_config(use_remote_backend=True, remote_sheet_id="X")

    assert gateway.config_result.status == StorageStatus.FAILED
    assert gateway.config_result.error
    # настройки действуют до перезапуска
    assert config.remote_enabled
    assert gateway.config == config
