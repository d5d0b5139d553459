from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Any, Optional
from datetime import date

from core import statistics
from core.tracker import HabitTracker
from utils.datetime_utils import date_key, month_days, month_key, parse_month_key
from ..dependencies import get_tracker

router = APIRouter(prefix="/api/stats", tags=["statistics"])

MONTH_QUERY = Query(None, pattern=r"^\d{4}-\d{2}$", description="Месяц в формате YYYY-MM, по умолчанию текущий")

def _reference_month(month: Optional[str], tracker: HabitTracker) -> date:
    """Первое число запрошенного месяца (статистика не зависит от отображаемой недели)"""
    if month is None:
        return tracker.clock().replace(day=1)
    try:
        return parse_month_key(month)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Неверный месяц: {month}")

@router.get("/dashboard", response_model=Dict[str, Any])
def get_dashboard(month: Optional[str] = MONTH_QUERY, tracker: HabitTracker = Depends(get_tracker)):
    """
    Все показатели дашборда за месяц: постоянство по дням,
    результаты по неделям, общий прогресс и топ привычек
    """
    reference = _reference_month(month, tracker)
    state = tracker.snapshot()
    return statistics.dashboard_stats(reference, state.habits, state.tracking_data).to_dict()

@router.get("/consistency", response_model=Dict[str, Any])
def get_consistency(month: Optional[str] = MONTH_QUERY, tracker: HabitTracker = Depends(get_tracker)):
    """Процент выполненных привычек по дням месяца"""
    reference = _reference_month(month, tracker)
    state = tracker.snapshot()
    days = month_days(reference)
    values = statistics.daily_consistency(days, state.habits, state.tracking_data)

    return {
        "month": month_key(reference),
        "days": [date_key(d) for d in days],
        "values": values
    }

@router.get("/weekly", response_model=Dict[str, Any])
def get_weekly(month: Optional[str] = MONTH_QUERY, tracker: HabitTracker = Depends(get_tracker)):
    """Процент выполнения по неделям месяца"""
    reference = _reference_month(month, tracker)
    state = tracker.snapshot()
    weeks = statistics.month_weeks(reference)
    values = statistics.weekly_performance(reference, state.habits, state.tracking_data)

    return {
        "month": month_key(reference),
        "week_starts": [date_key(w) for w in weeks],
        "values": values
    }

@router.get("/overall", response_model=Dict[str, Any])
def get_overall(month: Optional[str] = MONTH_QUERY, tracker: HabitTracker = Depends(get_tracker)):
    """Выполнено / осталось / процент за месяц"""
    reference = _reference_month(month, tracker)
    state = tracker.snapshot()
    totals = statistics.overall_totals(month_days(reference), state.habits, state.tracking_data)
    level = statistics.progress_level(totals.percentage)

    result = totals.to_dict()
    result.update({
        "month": month_key(reference),
        "progress_level": level.value,
        "progress_color": level.color
    })
    return result

@router.get("/top", response_model=Dict[str, Any])
def get_top_habits(month: Optional[str] = MONTH_QUERY,
                   limit: int = Query(statistics.TOP_HABITS_LIMIT, ge=1, le=statistics.TOP_HABITS_LIMIT),
                   tracker: HabitTracker = Depends(get_tracker)):
    """Лучшие привычки месяца по проценту выполнения"""
    reference = _reference_month(month, tracker)
    state = tracker.snapshot()
    stats = statistics.habit_stats(month_days(reference), state.habits, state.tracking_data)

    return {
        "month": month_key(reference),
        "top_habits": [h.to_dict() for h in statistics.rank_habits(stats, limit)]
    }
