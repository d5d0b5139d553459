#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Core Package
Модели, хранилище, трекер привычек и статистика
"""

from .models import (
    Habit,
    AppState,
    AppConfig,
    ValidationError
)

from .database import (
    StorageGateway,
    StorageResult,
    StorageStatus,
    LocalJSONBackend,
    MemoryBackend
)

from .tracker import HabitTracker

__all__ = [
    # Models
    'Habit',
    'AppState',
    'AppConfig',
    'ValidationError',

    # Storage
    'StorageGateway',
    'StorageResult',
    'StorageStatus',
    'LocalJSONBackend',
    'MemoryBackend',

    # Tracker
    'HabitTracker'
]
