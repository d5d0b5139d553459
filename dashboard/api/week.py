from fastapi import APIRouter, Depends

from core.statistics import is_done, weekly_summary
from core.tracker import HabitTracker
from shared.models import NavigateRequest, WeekView, WeekDay, WeekRow, WeeklySummaryOut
from utils.datetime_utils import date_key, day_label, week_days, week_label
from .habits import habit_out
from ..dependencies import get_tracker

router = APIRouter(prefix="/api/week", tags=["week"])

def build_week_view(tracker: HabitTracker) -> WeekView:
    """Сетка отображаемой недели: привычки x семь дней + сводка"""
    state = tracker.snapshot()
    start = state.current_week_start
    days = week_days(start)
    keys = [date_key(d) for d in days]

    rows = [
        WeekRow(
            habit=habit_out(habit),
            days={key: is_done(state.tracking_data, habit.id, key) for key in keys}
        )
        for habit in state.habits
    ]
    summary = weekly_summary(start, state.habits, state.tracking_data)

    return WeekView(
        week_start=date_key(start),
        label=week_label(start),
        days=[WeekDay(date=key, label=day_label(d)) for key, d in zip(keys, days)],
        rows=rows,
        summary=WeeklySummaryOut(**summary.to_dict())
    )

@router.get("", response_model=WeekView)
def get_week(tracker: HabitTracker = Depends(get_tracker)):
    """Отображаемая неделя"""
    return build_week_view(tracker)

@router.post("/navigate", response_model=WeekView)
def navigate_week(payload: NavigateRequest, tracker: HabitTracker = Depends(get_tracker)):
    """Предыдущая (-1) или следующая (1) неделя"""
    tracker.navigate_week(payload.direction)
    return build_week_view(tracker)

@router.post("/today", response_model=WeekView)
def current_week(tracker: HabitTracker = Depends(get_tracker)):
    """Вернуться к текущей неделе"""
    tracker.go_to_current_week()
    return build_week_view(tracker)
