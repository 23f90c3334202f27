from datetime import date, datetime, timedelta, timezone

import pytest

from kennel.errors import ValidationError
from kennel.utils.dates import (
    add_weeks,
    current_week,
    from_date_string,
    monday_of,
    parse_week,
    to_date_string,
    week_starts,
    weeks_between,
)


@pytest.mark.parametrize("day", range(7))
def test_monday_of_every_weekday(day):
    assert monday_of(date(2024, 1, 1) + timedelta(days=day)) == date(2024, 1, 1)


def test_sunday_belongs_to_the_previous_monday():
    assert monday_of(date(2024, 1, 7)) == date(2024, 1, 1)
    assert monday_of(date(2024, 1, 8)) == date(2024, 1, 8)


def test_aware_datetime_is_read_in_utc():
    # Monday 01:00 in UTC+3 is still Sunday in UTC
    value = datetime(2024, 1, 8, 1, 0, tzinfo=timezone(timedelta(hours=3)))
    assert monday_of(value) == date(2024, 1, 1)


def test_naive_datetime_and_string():
    assert monday_of(datetime(2024, 3, 6, 23, 59)) == date(2024, 3, 4)
    assert monday_of("2024-03-06") == date(2024, 3, 4)


def test_week_arithmetic_across_daylight_saving_changes():
    # US and EU clocks change in March; week-starts stay Mondays
    start = date(2024, 3, 4)
    assert add_weeks(start, 1) == date(2024, 3, 11)
    assert add_weeks(start, 4) == date(2024, 4, 1)
    assert add_weeks(start, -1) == date(2024, 2, 26)
    assert weeks_between(start, date(2024, 4, 3)) == 4
    assert weeks_between(date(2024, 4, 1), start) == -4


def test_week_starts():
    assert week_starts(date(2024, 1, 3), 3) == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]


def test_current_week_uses_given_today():
    assert current_week(date(2024, 2, 8)) == date(2024, 2, 5)


def test_date_strings():
    assert to_date_string(date(2024, 1, 1)) == "2024-01-01"
    assert from_date_string("2024-02-29") == date(2024, 2, 29)


@pytest.mark.parametrize("bad", ["2024-13-01", "01/02/2024", "", "2024-1-1x"])
def test_bad_date_strings_are_rejected(bad):
    with pytest.raises(ValidationError):
        from_date_string(bad)


def test_parse_week_requires_a_value():
    with pytest.raises(ValidationError):
        parse_week(None)
    assert parse_week("2024-01-05") == date(2024, 1, 1)
