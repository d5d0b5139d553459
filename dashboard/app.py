#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker Web Dashboard - FastAPI Application
JSON API трекера привычек: привычки, недельная сетка, статистика, настройки хранилища

Версия: 1.0.0
Дата: 2026-10-18
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from config import config
from core.models import ValidationError
from core.tracker import HabitTracker
from dashboard.api import habits, week, stats, settings
from dashboard.dependencies import init_tracker, get_tracker
from shared.models import HealthCheck

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

app_start_time = time.time()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    global app_start_time

    # Startup
    logger.info("🚀 Запуск HabitTracker Dashboard...")
    app_start_time = time.time()

    config.ensure_directories()
    tracker = init_tracker(config)

    logger.info(f"📊 Загружено привычек: {len(tracker.habits)}")
    logger.info(f"🌐 Dashboard доступен на: http://{config.server.host}:{config.server.port}")
    logger.info("✅ Dashboard готов к работе")

    yield

    # Shutdown
    logger.info("🛑 Остановка Dashboard...")

# Создание FastAPI приложения
app = FastAPI(
    title="HabitTracker Dashboard",
    description="Трекер привычек: ежедневные отметки и статистика за месяц",
    version=VERSION,
    docs_url="/api/docs" if config.server.debug_mode else None,
    redoc_url="/api/redoc" if config.server.debug_mode else None,
    lifespan=lifespan
)

# ===== MIDDLEWARE =====

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Логирование запросов"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} "
        f"- {response.status_code} "
        f"- {process_time:.3f}s"
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response

# ===== API РОУТЕРЫ =====

app.include_router(habits.router)
app.include_router(week.router)
app.include_router(stats.router)
app.include_router(settings.router)

# ===== СЛУЖЕБНЫЕ МАРШРУТЫ =====

@app.get("/health", response_model=HealthCheck)
def health_check(tracker: HabitTracker = Depends(get_tracker)):
    """Health check для мониторинга"""
    last_result = tracker.last_result
    status = "healthy" if last_result is None or last_result.ok else last_result.status.value

    return HealthCheck(
        status=status,
        service="habit-tracker",
        version=VERSION,
        timestamp=time.time(),
        habits=len(tracker.habits),
        uptime=time.time() - app_start_time
    )

# ===== ОБРАБОТЧИКИ ОШИБОК =====

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Ошибки валидации данных трекера"""
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "status_code": 400}
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Обработчик HTTP исключений"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code
        }
    )

# ===== ЗАПУСК ПРИЛОЖЕНИЯ =====

def run_dashboard(host: str = None, port: int = None, reload: bool = False, debug: bool = None):
    """Запуск дашборда"""
    host = host or config.server.host
    port = port or config.server.port
    debug = debug if debug is not None else config.server.debug_mode

    logger.info(f"🌐 Запуск Dashboard на http://{host}:{port}")
    logger.info(f"📁 Данные: {config.data_dir}")
    logger.info(f"🔧 Режим отладки: {debug}")

    try:
        uvicorn.run(
            "dashboard.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level="debug" if debug else "info",
            access_log=debug,
            server_header=False,
            date_header=False
        )
    except KeyboardInterrupt:
        logger.info("👋 Dashboard остановлен")
