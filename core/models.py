#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Core Data Models
Модели привычек, состояния трекера и настроек хранилища

Версия: 1.0.0
Дата: 2026-10-18
"""

import uuid
from datetime import date, datetime
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, replace
import logging

from utils.datetime_utils import week_start, week_start_iso, parse_week_start, today

logger = logging.getLogger(__name__)

# habit_id -> {YYYY-MM-DD: выполнено}
TrackingMap = Dict[str, Dict[str, bool]]

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

# ===== CORE MODELS =====

@dataclass
class Habit:
    """Привычка пользователя"""
    id: str
    name: str
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        """Валидация после создания объекта"""
        self.name = validate_text(self.name, min_length=1, max_length=200, field_name="name")

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в формат хранилища"""
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        """Десериализация из формата хранилища"""
        try:
            return cls(
                id=str(data["id"]),
                name=data["name"],
                created_at=data.get("createdAt") or datetime.now().isoformat()
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Не удалось загрузить привычку: {e}")

    @classmethod
    def create(cls, name: str) -> "Habit":
        """Создание новой привычки"""
        return cls(id=uuid.uuid4().hex, name=name)

@dataclass
class AppState:
    """Состояние трекера, которое сохраняется целиком"""
    habits: List[Habit] = field(default_factory=list)
    tracking_data: TrackingMap = field(default_factory=dict)
    current_week_start: date = field(default_factory=lambda: week_start(today()))

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в формат хранилища"""
        return {
            "habits": [h.to_dict() for h in self.habits],
            "trackingData": {
                habit_id: dict(days) for habit_id, days in self.tracking_data.items()
            },
            "currentWeekStart": week_start_iso(self.current_week_start)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], tz_name: Optional[str] = None) -> "AppState":
        """
        Десериализация из формата хранилища.

        Отсутствующие поля заменяются значениями по умолчанию,
        у каждой привычки гарантированно есть запись в trackingData.
        """
        if not isinstance(data, dict):
            raise ValidationError("Состояние должно быть объектом")

        raw_habits = data.get("habits") or []
        raw_tracking = data.get("trackingData") or {}
        if not isinstance(raw_habits, list) or not isinstance(raw_tracking, dict):
            raise ValidationError("Неверная структура habits/trackingData")

        habits = [Habit.from_dict(h) for h in raw_habits]

        tracking_data: TrackingMap = {}
        for habit_id, days in raw_tracking.items():
            if not isinstance(days, dict):
                raise ValidationError(f"Неверные данные отметок для {habit_id}")
            # только настоящий true считается отметкой, "false" или 1 - нет
            tracking_data[str(habit_id)] = {str(k): v is True for k, v in days.items()}

        for habit in habits:
            tracking_data.setdefault(habit.id, {})

        state = cls(habits=habits, tracking_data=tracking_data)

        raw_week = data.get("currentWeekStart")
        if raw_week is not None:
            try:
                if not isinstance(raw_week, str):
                    raise TypeError("ожидается строка ISO")
                state.current_week_start = parse_week_start(raw_week, tz_name)
            except (TypeError, ValueError):
                logger.warning(f"Некорректный currentWeekStart: {raw_week!r}, используем текущую неделю")

        return state

@dataclass(frozen=True)
class AppConfig:
    """Настройки хранилища (отдельная сохраняемая запись)"""
    use_remote_backend: bool = False
    remote_sheet_id: Optional[str] = None
    is_configured: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELD_KEYS = {
        "use_remote_backend": "useRemoteBackend",
        "remote_sheet_id": "remoteSheetId",
    }

    @property
    def remote_enabled(self) -> bool:
        """Удалённое хранилище включено и указан идентификатор таблицы"""
        return bool(self.use_remote_backend and self.remote_sheet_id)

    def merge(self, **changes) -> "AppConfig":
        """Новая конфигурация с частичным обновлением полей"""
        unknown = set(changes) - set(self._FIELD_KEYS)
        if unknown:
            raise ValidationError(f"Неизвестные поля конфигурации: {sorted(unknown)}")

        if "remote_sheet_id" in changes:
            sheet_id = changes["remote_sheet_id"]
            if isinstance(sheet_id, str):
                changes["remote_sheet_id"] = sheet_id.strip() or None

        return replace(self, is_configured=True, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["useRemoteBackend"] = self.use_remote_backend
        data["remoteSheetId"] = self.remote_sheet_id
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AppConfig":
        if not data or not isinstance(data, dict):
            return cls()

        known = set(cls._FIELD_KEYS.values())
        return cls(
            use_remote_backend=bool(data.get("useRemoteBackend", False)),
            remote_sheet_id=data.get("remoteSheetId") or None,
            is_configured=True,
            extra={k: v for k, v in data.items() if k not in known}
        )
