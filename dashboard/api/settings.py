from fastapi import APIRouter, HTTPException, Depends

from core.tracker import HabitTracker
from shared.models import StorageSettingsUpdate, StorageSettingsOut, StorageStatusOut
from ..dependencies import get_tracker

router = APIRouter(prefix="/api/settings", tags=["settings"])

def storage_settings_out(tracker: HabitTracker) -> StorageSettingsOut:
    storage_config = tracker.storage_config
    last_result = tracker.last_result
    config_result = tracker.gateway.config_result

    return StorageSettingsOut(
        use_remote_backend=storage_config.use_remote_backend,
        remote_sheet_id=storage_config.remote_sheet_id,
        is_configured=storage_config.is_configured,
        active_backend=tracker.gateway.active_backend_name,
        last_result=StorageStatusOut(**last_result.to_dict()) if last_result else None,
        config_result=StorageStatusOut(**config_result.to_dict()) if config_result else None
    )

@router.get("/storage", response_model=StorageSettingsOut)
def get_storage_settings(tracker: HabitTracker = Depends(get_tracker)):
    """
    Текущие настройки хранилища.

    is_configured=false означает первый запуск: клиент предлагает
    выбрать хранилище.
    """
    return storage_settings_out(tracker)

@router.put("/storage", response_model=StorageSettingsOut)
def update_storage_settings(payload: StorageSettingsUpdate, tracker: HabitTracker = Depends(get_tracker)):
    """Частичное обновление настроек; незаданные поля сохраняют прежние значения"""
    changes = payload.model_dump(exclude_unset=True)

    sheet_id = changes.get("remote_sheet_id", tracker.storage_config.remote_sheet_id)
    if changes.get("use_remote_backend") and not sheet_id:
        raise HTTPException(status_code=400, detail="Please enter a valid Google Sheet ID")

    tracker.configure_storage(**changes)
    return storage_settings_out(tracker)

@router.post("/storage/local", response_model=StorageSettingsOut)
def use_local_storage(tracker: HabitTracker = Depends(get_tracker)):
    """Переключиться на локальное хранилище"""
    tracker.configure_storage(use_remote_backend=False)
    return storage_settings_out(tracker)
