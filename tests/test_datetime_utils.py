from datetime import date, datetime, timedelta

import pytest
import pytz

from utils.datetime_utils import (
    date_key, day_label, month_days, parse_date_key, parse_month_key,
    parse_week_start, week_days, week_label, week_start, week_start_iso
)


def all_days_of(year):
    day = date(year, 1, 1)
    while day.year == year:
        yield day
        day += timedelta(days=1)


@pytest.mark.parametrize("year", [2023, 2024])
def test_week_start_is_monday_on_or_before(year):
    for day in all_days_of(year):
        start = week_start(day)
        assert start.weekday() == 0
        assert start <= day < start + timedelta(days=7)


def test_week_start_sunday_goes_back_six_days():
    assert week_start(date(2024, 3, 10)) == date(2024, 3, 4)


def test_week_start_monday_is_unchanged():
    assert week_start(date(2024, 3, 4)) == date(2024, 3, 4)


def test_week_start_is_idempotent():
    for day in all_days_of(2024):
        assert week_start(week_start(day)) == week_start(day)


def test_week_start_accepts_datetime():
    assert week_start(datetime(2024, 3, 6, 23, 59)) == date(2024, 3, 4)


def test_date_key_format():
    assert date_key(date(2024, 3, 1)) == "2024-03-01"
    assert date_key(date(987, 12, 31)) == "0987-12-31"


def test_date_key_uses_own_calendar_fields_for_aware_datetime():
    # 23:30 в Нью-Йорке - это уже следующий день в UTC
    moment = pytz.timezone("America/New_York").localize(datetime(2024, 3, 1, 23, 30))
    assert date_key(moment) == "2024-03-01"


def test_parse_date_key_round_trip():
    assert parse_date_key("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValueError):
        parse_date_key("2024-02-30")


def test_week_days():
    start = week_start(date(2024, 3, 13))
    days = week_days(start)
    assert len(days) == 7
    assert days[0] == start
    assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))


@pytest.mark.parametrize("reference, length", [
    (date(2024, 2, 10), 29),
    (date(2023, 2, 1), 28),
    (date(2024, 3, 31), 31),
    (date(2024, 4, 15), 30),
])
def test_month_days(reference, length):
    days = month_days(reference)
    assert len(days) == length
    assert days[0].day == 1
    assert all((d.year, d.month) == (reference.year, reference.month) for d in days)
    assert days == sorted(days)


def test_parse_month_key():
    assert parse_month_key("2024-03") == date(2024, 3, 1)


def test_parse_week_start_converts_utc_to_local_zone():
    # Понедельник 00:00 по Москве, сохранённый как момент UTC
    assert parse_week_start("2024-03-03T21:00:00.000Z", "Europe/Moscow") == date(2024, 3, 4)


def test_parse_week_start_realigns_naive_value():
    assert parse_week_start("2024-03-06T00:00:00") == date(2024, 3, 4)


def test_week_start_iso():
    assert week_start_iso(date(2024, 3, 4)) == "2024-03-04T00:00:00"


def test_labels():
    assert week_label(date(2024, 3, 4)) == "Mar 4 - Mar 10"
    assert week_label(date(2024, 2, 26)) == "Feb 26 - Mar 3"
    assert day_label(date(2024, 3, 4)) == "Mon 4"
