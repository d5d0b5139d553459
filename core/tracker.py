#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Habit Store
Хранит привычки и отметки выполнения в памяти, сохраняет их через StorageGateway

Версия: 1.0.0
Дата: 2026-10-18
"""

import threading
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Union
import logging

from core.models import Habit, AppState, AppConfig, TrackingMap, ValidationError
from core.database import StorageGateway, StorageResult
from utils.datetime_utils import date_key, week_start, today

logger = logging.getLogger(__name__)

Listener = Callable[["HabitTracker"], None]


class HabitTracker:
    """
    Единственный владелец AppState.

    Каждая успешная мутация сохраняется через шлюз и оповещает
    подписчиков; отрисовка и пересчёт статистики - их забота.
    """

    def __init__(self, gateway: StorageGateway,
                 clock: Optional[Callable[[], date]] = None):
        self.gateway = gateway
        self.clock = clock or (lambda: today(gateway.tz_name))
        self.state = AppState(current_week_start=week_start(self.clock()))
        self.last_result: Optional[StorageResult] = None

        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    # ===== PROPERTIES =====

    @property
    def habits(self) -> List[Habit]:
        return self.state.habits

    @property
    def tracking_data(self) -> TrackingMap:
        return self.state.tracking_data

    @property
    def current_week_start(self) -> date:
        return self.state.current_week_start

    @property
    def storage_config(self) -> AppConfig:
        return self.gateway.config

    # ===== LIFECYCLE =====

    def load(self) -> AppState:
        """Загрузить состояние из хранилища или начать с пустого"""
        with self._lock:
            loaded = self.gateway.load()
            self.last_result = self.gateway.last_result

            if loaded is None:
                self.state = AppState(current_week_start=week_start(self.clock()))
                logger.info("📭 Сохранённых данных нет, начинаем с пустого трекера")
            else:
                self.state = loaded
                logger.info(f"📊 Загружено привычек: {len(self.state.habits)}")

            self._notify()
            return self.state

    def snapshot(self) -> AppState:
        """Независимая копия текущего состояния"""
        with self._lock:
            return AppState.from_dict(self.state.to_dict(), self.gateway.tz_name)

    # ===== OBSERVERS =====

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"❌ Ошибка подписчика {listener!r}: {e}")

    def _persist(self) -> StorageResult:
        self.last_result = self.gateway.save(self.state)
        self._notify()
        return self.last_result

    # ===== HABITS =====

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        for habit in self.state.habits:
            if habit.id == habit_id:
                return habit
        return None

    def add_habit(self, name: str) -> Optional[Habit]:
        """Добавить привычку; пустое имя игнорируется без сохранения"""
        if not isinstance(name, str) or not name.strip():
            return None

        with self._lock:
            habit = Habit.create(name)
            self.state.habits.append(habit)
            self.state.tracking_data[habit.id] = {}
            self._persist()

        logger.info(f"➕ Добавлена привычка {habit.name!r} ({habit.id})")
        return habit

    def delete_habit(self, habit_id: str) -> bool:
        """
        Удалить привычку вместе со всеми отметками.

        Подтверждение удаления - политика вызывающей стороны,
        здесь удаление безусловное. Неизвестный id - ничего не делаем.
        """
        with self._lock:
            habit = self.get_habit(habit_id)
            if habit is None:
                return False

            self.state.habits = [h for h in self.state.habits if h.id != habit_id]
            self.state.tracking_data.pop(habit_id, None)
            self._persist()

        logger.info(f"🗑 Удалена привычка {habit.name!r} ({habit_id})")
        return True

    # ===== TRACKING =====

    def is_completed(self, habit_id: str, day: Union[str, date]) -> bool:
        key = day if isinstance(day, str) else date_key(day)
        return bool(self.state.tracking_data.get(habit_id, {}).get(key, False))

    def toggle(self, habit_id: str, day: Union[str, date]) -> bool:
        """Переключить отметку за день и вернуть новое значение"""
        key = day if isinstance(day, str) else date_key(day)

        with self._lock:
            if self.get_habit(habit_id) is None:
                logger.debug(f"Отметка для неизвестной привычки {habit_id} пропущена")
                return False

            days: Dict[str, bool] = self.state.tracking_data.setdefault(habit_id, {})
            days[key] = not days.get(key, False)
            value = days[key]
            self._persist()

        return value

    # ===== WEEK NAVIGATION =====

    def navigate_week(self, direction: int) -> date:
        """Сдвинуть отображаемую неделю на одну вперёд (1) или назад (-1)"""
        if direction not in (-1, 1):
            raise ValidationError(f"direction должен быть -1 или 1, получено {direction!r}")

        with self._lock:
            moved = self.state.current_week_start + timedelta(days=7 * direction)
            self.state.current_week_start = week_start(moved)
            self._persist()
            return self.state.current_week_start

    def go_to_current_week(self) -> date:
        with self._lock:
            self.state.current_week_start = week_start(self.clock())
            self._persist()
            return self.state.current_week_start

    # ===== STORAGE SETTINGS =====

    def configure_storage(self, **changes) -> AppConfig:
        """
        Обновить настройки хранилища и перечитать данные из выбранного.

        Если в новом хранилище данных ещё нет, текущее состояние
        остаётся в памяти и записывается туда.
        """
        with self._lock:
            config = self.gateway.save_config(**changes)
            loaded = self.gateway.load()
            self.last_result = self.gateway.last_result

            if loaded is None:
                self._persist()
            else:
                self.state = loaded
                self._notify()
            return config
