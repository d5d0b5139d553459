#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitTracker - Statistics
Агрегаты для дашборда: постоянство по дням, результаты по неделям,
общий прогресс за месяц и рейтинг привычек

Версия: 1.0.0
Дата: 2026-10-18
"""

from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Sequence, Any
from dataclasses import dataclass, field

from core.models import Habit, TrackingMap
from utils.datetime_utils import date_key, month_days, week_days, week_start, week_label

TOP_HABITS_LIMIT = 10

# ===== HELPERS =====

def percentage(completed: int, total: int) -> int:
    """
    Целый процент выполнения, округление половины вверх
    (встроенный round() округляет к чётному); 0 если возможных отметок нет
    """
    if total == 0:
        return 0
    # floor(100 * completed / total + 0.5) в целых числах, без ошибок float
    return (200 * completed + total) // (2 * total)

def is_done(tracking_data: TrackingMap, habit_id: str, key: str) -> bool:
    return bool(tracking_data.get(habit_id, {}).get(key, False))

def _completed_on(habits: Sequence[Habit], tracking_data: TrackingMap, key: str) -> int:
    return sum(1 for habit in habits if is_done(tracking_data, habit.id, key))

# ===== RESULT MODELS =====

class ProgressLevel(Enum):
    """Цветовая зона индикатора прогресса"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def color(self) -> str:
        return {
            ProgressLevel.HIGH: "#10b981",
            ProgressLevel.MEDIUM: "#f59e0b",
            ProgressLevel.LOW: "#ef4444",
        }[self]

@dataclass
class OverallTotals:
    completed: int = 0
    remaining: int = 0
    percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'completed': self.completed,
            'remaining': self.remaining,
            'percentage': self.percentage
        }

@dataclass
class HabitStat:
    """Выполнение одной привычки за период"""
    habit_id: str
    name: str
    completed: int = 0
    total: int = 0

@dataclass
class RankedHabit:
    habit_id: str
    name: str
    completed: int
    total: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'habit_id': self.habit_id,
            'name': self.name,
            'completed': self.completed,
            'total': self.total,
            'percentage': self.percentage
        }

@dataclass
class WeeklySummary:
    """Сводка по отображаемой неделе"""
    week_start: date
    total_habits: int = 0
    completed: int = 0
    percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'week_start': date_key(self.week_start),
            'label': week_label(self.week_start),
            'total_habits': self.total_habits,
            'completed': self.completed,
            'percentage': self.percentage
        }

@dataclass
class DashboardStats:
    """Всё, что нужно дашборду за один месяц"""
    month: date
    days: List[date] = field(default_factory=list)
    daily_consistency: List[float] = field(default_factory=list)
    weeks: List[date] = field(default_factory=list)
    weekly_performance: List[float] = field(default_factory=list)
    totals: OverallTotals = field(default_factory=OverallTotals)
    top_habits: List[RankedHabit] = field(default_factory=list)

    @property
    def level(self) -> ProgressLevel:
        return progress_level(self.totals.percentage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'month': f"{self.month.year:04d}-{self.month.month:02d}",
            'consistency': {
                'labels': [d.day for d in self.days],
                'values': self.daily_consistency
            },
            'weekly': {
                'labels': [f"Week {i + 1}" for i in range(len(self.weeks))],
                'week_starts': [date_key(w) for w in self.weeks],
                'values': self.weekly_performance
            },
            'totals': self.totals.to_dict(),
            'progress_level': self.level.value,
            'progress_color': self.level.color,
            'top_habits': [h.to_dict() for h in self.top_habits]
        }

# ===== AGGREGATES =====

def daily_consistency(days: Sequence[date], habits: Sequence[Habit],
                      tracking_data: TrackingMap) -> List[float]:
    """Процент выполненных привычек за каждый день, в порядке дней"""
    if not habits:
        return [0 for _ in days]

    return [
        _completed_on(habits, tracking_data, date_key(day)) / len(habits) * 100
        for day in days
    ]

def month_weeks(reference: date) -> List[date]:
    """
    Понедельники недель месяца.

    Первая неделя начинается с понедельника недели первого числа
    (он может попасть в прошлый месяц), последняя - с понедельника,
    который ещё не вышел за пределы месяца.
    """
    days = month_days(reference)
    last_day = days[-1]

    weeks = []
    current = week_start(days[0])
    while current <= last_day:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks

def weekly_performance(reference: date, habits: Sequence[Habit],
                       tracking_data: TrackingMap) -> List[float]:
    """Процент выполнения по неделям месяца; считаются только дни этого месяца"""
    result = []
    for start in month_weeks(reference):
        completed = 0
        total = 0
        for day in week_days(start):
            if (day.year, day.month) != (reference.year, reference.month):
                continue
            total += len(habits)
            completed += _completed_on(habits, tracking_data, date_key(day))
        result.append(completed / total * 100 if total > 0 else 0)
    return result

def overall_totals(days: Sequence[date], habits: Sequence[Habit],
                   tracking_data: TrackingMap) -> OverallTotals:
    """Выполнено/осталось/процент за период"""
    total_possible = len(days) * len(habits)
    completed = sum(_completed_on(habits, tracking_data, date_key(day)) for day in days)

    return OverallTotals(
        completed=completed,
        remaining=total_possible - completed,
        percentage=percentage(completed, total_possible)
    )

def habit_stats(days: Sequence[date], habits: Sequence[Habit],
                tracking_data: TrackingMap) -> List[HabitStat]:
    """Статистика по каждой привычке в порядке отображения"""
    keys = [date_key(day) for day in days]
    return [
        HabitStat(
            habit_id=habit.id,
            name=habit.name,
            completed=sum(1 for key in keys if is_done(tracking_data, habit.id, key)),
            total=len(keys)
        )
        for habit in habits
    ]

def rank_habits(stats: Sequence[HabitStat], limit: int = TOP_HABITS_LIMIT) -> List[RankedHabit]:
    """Лучшие привычки по проценту выполнения; при равенстве сохраняется исходный порядок"""
    ranked = [
        RankedHabit(
            habit_id=stat.habit_id,
            name=stat.name,
            completed=stat.completed,
            total=stat.total,
            percentage=percentage(stat.completed, stat.total)
        )
        for stat in stats
    ]
    # sorted() стабилен
    ranked = sorted(ranked, key=lambda h: h.percentage, reverse=True)
    return ranked[:limit]

def weekly_summary(start: date, habits: Sequence[Habit],
                   tracking_data: TrackingMap) -> WeeklySummary:
    """Итоги недели для сетки: все семь дней независимо от месяца"""
    keys = [date_key(day) for day in week_days(start)]
    completed = sum(_completed_on(habits, tracking_data, key) for key in keys)

    return WeeklySummary(
        week_start=start,
        total_habits=len(habits),
        completed=completed,
        percentage=percentage(completed, len(habits) * 7)
    )

def progress_level(value: int) -> ProgressLevel:
    if value >= 70:
        return ProgressLevel.HIGH
    if value >= 50:
        return ProgressLevel.MEDIUM
    return ProgressLevel.LOW

def dashboard_stats(reference: date, habits: Sequence[Habit],
                    tracking_data: TrackingMap) -> DashboardStats:
    """Пересчёт всех показателей дашборда за месяц reference"""
    days = month_days(reference)

    return DashboardStats(
        month=days[0],
        days=days,
        daily_consistency=daily_consistency(days, habits, tracking_data),
        weeks=month_weeks(reference),
        weekly_performance=weekly_performance(reference, habits, tracking_data),
        totals=overall_totals(days, habits, tracking_data),
        top_habits=rank_habits(habit_stats(days, habits, tracking_data))
    )
