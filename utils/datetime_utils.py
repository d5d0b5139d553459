# utils/datetime_utils.py

import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import pytz

DEFAULT_TZ = "Europe/Moscow"

DateLike = Union[date, datetime]


def get_timezone(tz_name: Optional[str] = None):
    return pytz.timezone(tz_name or DEFAULT_TZ)


def today(tz_name: Optional[str] = None) -> date:
    """Сегодняшняя календарная дата в заданной таймзоне"""
    return datetime.now(get_timezone(tz_name)).date()


def _as_date(value: DateLike) -> date:
    # datetime наследуется от date, поэтому проверяем его первым
    if isinstance(value, datetime):
        return value.date()
    return value


def week_start(value: DateLike) -> date:
    """
    Понедельник недели, в которую попадает дата.

    Неделя всегда считается с понедельника по воскресенье,
    независимо от локали: воскресенье -> шесть дней назад.
    """
    day = _as_date(value)
    return day - timedelta(days=day.weekday())


def date_key(value: DateLike) -> str:
    """
    Ключ дня в формате YYYY-MM-DD.

    Берутся собственные календарные поля значения: datetime с таймзоной
    не переводится в UTC, иначе ключ съезжает через полночь.
    """
    day = _as_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date_key(key: str) -> date:
    return datetime.strptime(key, "%Y-%m-%d").date()


def week_days(start: DateLike) -> List[date]:
    """Семь дней недели, начиная с start"""
    first = _as_date(start)
    return [first + timedelta(days=i) for i in range(7)]


def month_days(reference: DateLike) -> List[date]:
    """Все дни месяца, в который попадает reference"""
    day = _as_date(reference)
    days_in_month = calendar.monthrange(day.year, day.month)[1]
    return [date(day.year, day.month, d) for d in range(1, days_in_month + 1)]


def month_key(value: DateLike) -> str:
    day = _as_date(value)
    return f"{day.year:04d}-{day.month:02d}"


def parse_month_key(key: str) -> date:
    """'2024-03' -> date(2024, 3, 1)"""
    return datetime.strptime(key, "%Y-%m").date()


def parse_week_start(value: str, tz_name: Optional[str] = None) -> date:
    """
    Разбор сохранённого currentWeekStart.

    Старые записи хранят момент в UTC ('2024-03-03T21:00:00.000Z'),
    такие значения переводятся в локальную таймзону до взятия даты.
    """
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is not None:
        moment = moment.astimezone(get_timezone(tz_name))
    return week_start(moment)


def week_start_iso(start: DateLike) -> str:
    return datetime.combine(_as_date(start), datetime.min.time()).isoformat()


def day_label(value: DateLike) -> str:
    """'Mon 4'"""
    day = _as_date(value)
    return f"{day.strftime('%a')} {day.day}"


def short_date_label(value: DateLike) -> str:
    """'Mar 4'"""
    day = _as_date(value)
    return f"{day.strftime('%b')} {day.day}"


def week_label(start: DateLike) -> str:
    """Подпись недели для сетки: 'Mar 4 - Mar 10'"""
    days = week_days(start)
    return f"{short_date_label(days[0])} - {short_date_label(days[-1])}"
