#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Dashboard Dependencies
Провайдеры зависимостей для FastAPI приложения

Версия: 1.0.0
Дата: 2026-10-18
"""

import logging
from typing import Optional

from config import TrackerConfig, config
from core.database import LocalJSONBackend, StorageGateway
from core.tracker import HabitTracker
from services.google_sheets import GoogleSheetsBackend, sheets_backend_factory

logger = logging.getLogger(__name__)

# ===== ГЛОБАЛЬНЫЕ ПЕРЕМЕННЫЕ =====

# Трекер привычек (синглтон)
_tracker: Optional[HabitTracker] = None

# ===== ИНИЦИАЛИЗАЦИЯ КОМПОНЕНТОВ =====

def build_gateway(settings: TrackerConfig) -> StorageGateway:
    """Шлюз хранилища: локальные JSON файлы + Google Sheets по настройке"""
    return StorageGateway(
        local_backend=LocalJSONBackend(settings.storage.data_dir),
        remote_factory=sheets_backend_factory(
            settings.integrations.google_credentials_file,
            settings.integrations.google_worksheet
        ),
        remote_name=GoogleSheetsBackend.name,
        data_key=settings.storage.data_key,
        config_key=settings.storage.config_key,
        tz_name=settings.timezone
    )

def init_tracker(settings: TrackerConfig = config) -> HabitTracker:
    """Инициализация трекера привычек"""
    global _tracker

    if _tracker is None:
        logger.info("🔄 Инициализация HabitTracker...")
        _tracker = HabitTracker(build_gateway(settings))
        _tracker.load()
        logger.info(f"✅ HabitTracker инициализирован, хранилище: {_tracker.gateway.active_backend_name}")

    return _tracker

def reset_tracker() -> None:
    global _tracker
    _tracker = None

# ===== ПРОВАЙДЕРЫ ЗАВИСИМОСТЕЙ =====

def get_tracker() -> HabitTracker:
    """Получить экземпляр HabitTracker"""
    if _tracker is None:
        return init_tracker()
    return _tracker
