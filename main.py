#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - точка входа
Запуск веб-сервера с JSON API трекера привычек

Использование:
    python main.py                    # настройки из переменных окружения
    python main.py --port 8080        # другой порт
    python main.py --debug --reload   # разработка

Версия: 1.0.0
Дата: 2026-10-18
"""

import argparse
import logging
import sys

from config import config
from utils.logger import setup_logging

logger = logging.getLogger(__name__)

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Запуск HabitTracker Dashboard')
    parser.add_argument('--host', default=config.server.host, help='Хост сервера')
    parser.add_argument('--port', type=int, default=config.server.port, help='Порт сервера')
    parser.add_argument('--debug', action='store_true', help='Режим отладки')
    parser.add_argument('--reload', action='store_true', help='Автоперезагрузка при изменениях')
    return parser.parse_args(argv)

def main(argv=None):
    """Главная функция запуска веб-сервера"""
    args = parse_args(argv)
    setup_logging(config, debug=args.debug)

    if args.debug:
        logger.info("🔧 Режим отладки активирован")

    # Импорт после настройки логирования
    from dashboard.app import run_dashboard

    try:
        run_dashboard(
            host=args.host,
            port=args.port,
            reload=args.reload,
            debug=args.debug or config.server.debug_mode
        )
    except Exception as e:
        logger.error(f"💥 Критическая ошибка: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
