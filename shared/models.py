from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict, Literal
import datetime as dt

# Запросы

class HabitCreate(BaseModel):
    name: str = Field(..., max_length=200)

class ToggleRequest(BaseModel):
    date: dt.date

class NavigateRequest(BaseModel):
    direction: Literal[-1, 1]

class StorageSettingsUpdate(BaseModel):
    use_remote_backend: Optional[bool] = None
    remote_sheet_id: Optional[str] = Field(None, max_length=200)

    @field_validator('remote_sheet_id')
    @classmethod
    def strip_sheet_id(cls, v):
        if v is None:
            return v
        return v.strip()

# Ответы

class HabitOut(BaseModel):
    id: str
    name: str
    created_at: str

class ToggleResult(BaseModel):
    habit_id: str
    date: str
    completed: bool

class DeleteResult(BaseModel):
    habit_id: str
    deleted: bool

class StorageStatusOut(BaseModel):
    status: str
    backend: str
    error: Optional[str] = None
    timestamp: str

class WeekDay(BaseModel):
    date: str
    label: str

class WeekRow(BaseModel):
    habit: HabitOut
    days: Dict[str, bool]

class WeeklySummaryOut(BaseModel):
    week_start: str
    label: str
    total_habits: int
    completed: int
    percentage: int

class WeekView(BaseModel):
    week_start: str
    label: str
    days: List[WeekDay]
    rows: List[WeekRow]
    summary: WeeklySummaryOut

class StorageSettingsOut(BaseModel):
    use_remote_backend: bool
    remote_sheet_id: Optional[str] = None
    is_configured: bool
    active_backend: str
    last_result: Optional[StorageStatusOut] = None
    config_result: Optional[StorageStatusOut] = None

class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    habits: int
    uptime: float
