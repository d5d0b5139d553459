#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Configuration
Централизованная конфигурация из переменных окружения с валидацией

Версия: 1.0.0
Дата: 2026-10-18
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

# Сторонние библиотеки, которым достаточно WARNING
NOISY_LOGGERS = ('urllib3', 'gspread', 'google.auth')

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Конфигурация локального хранилища"""
    data_dir: Path
    data_key: str = "habitTrackerData"
    config_key: str = "habitTrackerConfig"

@dataclass
class IntegrationsConfig:
    """Конфигурация интеграций"""
    google_credentials_file: Optional[Path] = None
    google_worksheet: str = "habit_tracker"

@dataclass
class ServerConfig:
    """Конфигурация сервера"""
    host: str = "0.0.0.0"
    port: int = 8000
    debug_mode: bool = False

class TrackerConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Хранилище
        self.storage = StorageConfig(
            data_dir=self.data_dir,
            data_key=os.getenv('DATA_KEY', 'habitTrackerData'),
            config_key=os.getenv('CONFIG_KEY', 'habitTrackerConfig')
        )

        # Интеграции
        credentials = os.getenv('GOOGLE_CREDENTIALS_FILE', 'service_account.json')
        self.integrations = IntegrationsConfig(
            google_credentials_file=Path(credentials) if credentials else None,
            google_worksheet=os.getenv('GOOGLE_WORKSHEET', 'habit_tracker')
        )

        # Сервер
        self.server = ServerConfig(
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', 8000)),
            debug_mode=os.getenv('DEBUG_MODE', 'false').lower() == 'true'
        )

        # Таймзона для "сегодня" и текущей недели
        self.timezone = os.getenv('TIMEZONE', 'Europe/Moscow')

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = os.getenv('LOG_TO_FILE', 'false').lower() == 'true'
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if self.timezone not in pytz.all_timezones_set:
            errors.append(f"Неизвестная таймзона TIMEZONE={self.timezone}")

        if not 1024 <= self.server.port <= 65535:
            errors.append(f"Порт {self.server.port} вне допустимого диапазона (1024-65535)")

        if not self.storage.data_key or not self.storage.config_key:
            errors.append("DATA_KEY и CONFIG_KEY не могут быть пустыми")

        if self.storage.data_key == self.storage.config_key:
            errors.append("DATA_KEY и CONFIG_KEY должны различаться")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """
        dictConfig для трекера: консоль и, при LOG_TO_FILE=true,
        файл с ротацией. HTTP и Google клиенты пишут только предупреждения.
        """
        handlers = ['console', 'file'] if self.log_to_file else ['console']
        level = self.log_level.value

        handler_configs = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': level,
                'formatter': 'default',
                'stream': sys.stdout
            }
        }
        if self.log_to_file:
            handler_configs['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': level,
                'formatter': 'default',
                'filename': str(self.log_dir / f"habit_tracker_{self.environment.value}.log"),
                'maxBytes': 10 * 1024 * 1024,
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        loggers = {'': {'level': level, 'handlers': handlers, 'propagate': False}}
        for noisy in NOISY_LOGGERS:
            loggers[noisy] = {'level': 'WARNING', 'handlers': handlers, 'propagate': False}

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {'format': self.log_format, 'datefmt': '%Y-%m-%d %H:%M:%S'}
            },
            'handlers': handler_configs,
            'loggers': loggers
        }

# Глобальный экземпляр конфигурации
config = TrackerConfig()

__all__ = [
    'config',
    'TrackerConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'IntegrationsConfig',
    'ServerConfig'
]
