#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Storage Gateway
Сохранение состояния трекера и настроек в выбранное хранилище

Версия: 1.0.0
Дата: 2026-10-18
"""

import json
import shutil
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Any, Callable, Tuple
from dataclasses import dataclass, field
import logging

from core.models import AppState, AppConfig, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_DATA_KEY = "habitTrackerData"
DEFAULT_CONFIG_KEY = "habitTrackerConfig"

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Базовое исключение для ошибок хранилища"""
    pass

class DatabaseCorruptionError(DatabaseError):
    """Сохранённые данные повреждены"""
    pass

class BackendUnavailableError(DatabaseError):
    """Хранилище недоступно (нет доступа, ошибка API, ошибка записи)"""
    pass

# ===== RESULTS =====

class StorageStatus(Enum):
    """Итог операции с хранилищем"""
    OK = "ok"
    DEGRADED = "degraded"  # удалённое хранилище недоступно, использовано локальное
    FAILED = "failed"

@dataclass
class StorageResult:
    """Результат чтения или записи"""
    status: StorageStatus
    backend: str
    error: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def ok(self) -> bool:
        return self.status == StorageStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'backend': self.backend,
            'error': self.error,
            'timestamp': self.timestamp
        }

# ===== BACKENDS =====

class StorageBackend(ABC):
    """Key-value хранилище JSON-записей"""

    name = "backend"

    @abstractmethod
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """Прочитать запись; None если её нет"""

    @abstractmethod
    def save(self, key: str, data: Dict[str, Any]) -> None:
        """Записать запись целиком"""

class MemoryBackend(StorageBackend):
    """Хранилище в памяти процесса"""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        # Храним сериализованный JSON, чтобы наружу не утекали ссылки на объекты
        self.records: Dict[str, str] = dict(initial or {})
        self.save_count = 0

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.records.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise DatabaseCorruptionError(f"Запись {key} повреждена: {e}")

    def save(self, key: str, data: Dict[str, Any]) -> None:
        self.records[key] = json.dumps(data, ensure_ascii=False)
        self.save_count += 1

class LocalJSONBackend(StorageBackend):
    """Локальное хранилище: один JSON файл на ключ"""

    name = "local"

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.file_lock = threading.RLock()

    def _file(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._file(key)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DatabaseCorruptionError(f"Файл {path} повреждён: {e}")
        except OSError as e:
            raise BackendUnavailableError(f"Не удалось прочитать {path}: {e}")

    def save(self, key: str, data: Dict[str, Any]) -> None:
        path = self._file(key)
        with self.file_lock:
            # Атомарное сохранение через временный файл
            temp_file = path.with_suffix('.tmp')
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                shutil.move(str(temp_file), str(path))
            except OSError as e:
                if temp_file.exists():
                    temp_file.unlink()
                raise BackendUnavailableError(f"Не удалось записать {path}: {e}")

# ===== GATEWAY =====

RemoteFactory = Callable[[str], StorageBackend]

class StorageGateway:
    """
    Загрузка и сохранение AppState/AppConfig.

    Настройки всегда хранятся в локальном хранилище. Данные трекера идут
    в удалённое хранилище, если оно включено в настройках, указан
    идентификатор таблицы и передана фабрика удалённого хранилища;
    иначе в локальное. Недоступность удалённого хранилища не скрывается:
    запись уходит в локальное, а результат помечается как DEGRADED.
    """

    def __init__(self, local_backend: StorageBackend,
                 remote_factory: Optional[RemoteFactory] = None,
                 remote_name: str = "remote",
                 config: Optional[AppConfig] = None,
                 data_key: str = DEFAULT_DATA_KEY,
                 config_key: str = DEFAULT_CONFIG_KEY,
                 tz_name: Optional[str] = None):
        self.local = local_backend
        self.remote_factory = remote_factory
        self.remote_name = remote_name
        self.data_key = data_key
        self.config_key = config_key
        self.tz_name = tz_name
        self.last_result: Optional[StorageResult] = None
        # результат последней записи настроек
        self.config_result: Optional[StorageResult] = None

        self._remote: Optional[StorageBackend] = None
        self._remote_sheet_id: Optional[str] = None

        self.config = config if config is not None else self.load_config()

    # === ВЫБОР ХРАНИЛИЩА ===

    @property
    def uses_remote(self) -> bool:
        return self.config.remote_enabled and self.remote_factory is not None

    @property
    def active_backend_name(self) -> str:
        if self.uses_remote:
            return self.remote_name
        return self.local.name

    def _remote_backend(self) -> StorageBackend:
        """Удалённое хранилище для текущего идентификатора таблицы"""
        sheet_id = self.config.remote_sheet_id
        if self._remote is None or self._remote_sheet_id != sheet_id:
            self._remote = self.remote_factory(sheet_id)
            self._remote_sheet_id = sheet_id
        return self._remote

    # === ДАННЫЕ ТРЕКЕРА ===

    def load(self) -> Optional[AppState]:
        """Загрузить состояние; None если его нет или оно повреждено"""
        data, self.last_result = self._read(self.data_key)
        if data is None:
            return None

        try:
            return AppState.from_dict(data, self.tz_name)
        except ValidationError as e:
            logger.warning(f"⚠️ Сохранённое состояние некорректно, игнорируем: {e}")
            return None

    def save(self, state: AppState) -> StorageResult:
        """Сохранить состояние; ошибки хранилища возвращаются в результате"""
        self.last_result = self._write(self.data_key, state.to_dict())
        return self.last_result

    def _read(self, key: str) -> Tuple[Optional[Dict[str, Any]], StorageResult]:
        degraded_error = None

        if self.uses_remote:
            try:
                remote = self._remote_backend()
                return remote.load(key), StorageResult(StorageStatus.OK, remote.name)
            except DatabaseCorruptionError as e:
                logger.warning(f"⚠️ Удалённая запись {key} повреждена: {e}")
                return None, StorageResult(StorageStatus.OK, self._remote.name, error=str(e))
            except BackendUnavailableError as e:
                logger.warning(f"⚠️ Удалённое хранилище недоступно, читаем локально: {e}")
                degraded_error = str(e)

        status = StorageStatus.DEGRADED if degraded_error else StorageStatus.OK
        try:
            data = self.local.load(key)
        except DatabaseCorruptionError as e:
            logger.warning(f"⚠️ Локальная запись {key} повреждена: {e}")
            return None, StorageResult(status, self.local.name, error=str(e))
        except DatabaseError as e:
            logger.error(f"❌ Ошибка чтения {key}: {e}")
            return None, StorageResult(StorageStatus.FAILED, self.local.name, error=str(e))

        return data, StorageResult(status, self.local.name, error=degraded_error)

    def _write(self, key: str, data: Dict[str, Any]) -> StorageResult:
        degraded_error = None

        if self.uses_remote:
            try:
                remote = self._remote_backend()
                remote.save(key, data)
                return StorageResult(StorageStatus.OK, remote.name)
            except BackendUnavailableError as e:
                logger.warning(f"⚠️ Удалённое хранилище недоступно, сохраняем локально: {e}")
                degraded_error = str(e)

        try:
            self.local.save(key, data)
        except DatabaseError as e:
            logger.error(f"❌ Не удалось сохранить {key}: {e}")
            return StorageResult(StorageStatus.FAILED, self.local.name, error=str(e))

        status = StorageStatus.DEGRADED if degraded_error else StorageStatus.OK
        return StorageResult(status, self.local.name, error=degraded_error)

    # === НАСТРОЙКИ ===

    def load_config(self) -> AppConfig:
        """Прочитать настройки из локального хранилища"""
        try:
            return AppConfig.from_dict(self.local.load(self.config_key))
        except DatabaseError as e:
            logger.warning(f"⚠️ Настройки хранилища не прочитаны, используем значения по умолчанию: {e}")
            return AppConfig()

    def save_config(self, **changes) -> AppConfig:
        """
        Частично обновить настройки.

        Изменения накладываются на сохранённую запись, поэтому ранее
        заданные поля не теряются. Если запись не удалась, настройки
        действуют до перезапуска, а ошибка видна в config_result.
        """
        merged = self.load_config().merge(**changes)

        try:
            self.local.save(self.config_key, merged.to_dict())
            self.config_result = StorageResult(StorageStatus.OK, self.local.name)
        except DatabaseError as e:
            logger.error(f"❌ Не удалось сохранить настройки: {e}")
            self.config_result = StorageResult(StorageStatus.FAILED, self.local.name, error=str(e))

        self.config = merged
        logger.info(f"🔧 Хранилище: {self.active_backend_name}")
        return merged
