from fastapi import APIRouter, HTTPException, Depends
from typing import List

from core.models import Habit
from core.tracker import HabitTracker
from shared.models import HabitCreate, HabitOut, ToggleRequest, ToggleResult, DeleteResult
from utils.datetime_utils import date_key
from ..dependencies import get_tracker

router = APIRouter(prefix="/api/habits", tags=["habits"])

def habit_out(habit: Habit) -> HabitOut:
    return HabitOut(id=habit.id, name=habit.name, created_at=habit.created_at)

@router.get("", response_model=List[HabitOut])
def list_habits(tracker: HabitTracker = Depends(get_tracker)):
    """Список привычек в порядке отображения"""
    return [habit_out(h) for h in tracker.snapshot().habits]

@router.post("", response_model=HabitOut, status_code=201)
def create_habit(payload: HabitCreate, tracker: HabitTracker = Depends(get_tracker)):
    """Добавить привычку"""
    habit = tracker.add_habit(payload.name)
    if habit is None:
        raise HTTPException(status_code=400, detail="Please enter a habit name")
    return habit_out(habit)

@router.delete("/{habit_id}", response_model=DeleteResult)
def delete_habit(habit_id: str, tracker: HabitTracker = Depends(get_tracker)):
    """
    Удалить привычку и все её отметки.

    Подтверждение удаления запрашивает клиент до вызова.
    """
    return DeleteResult(habit_id=habit_id, deleted=tracker.delete_habit(habit_id))

@router.post("/{habit_id}/toggle", response_model=ToggleResult)
def toggle_habit(habit_id: str, payload: ToggleRequest, tracker: HabitTracker = Depends(get_tracker)):
    """Переключить отметку за день"""
    key = date_key(payload.date)
    return ToggleResult(habit_id=habit_id, date=key, completed=tracker.toggle(habit_id, key))
