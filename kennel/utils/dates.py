"""Week arithmetic.

Every week in the scheduling model is identified by its Monday. Values are
plain ``datetime.date`` objects so they carry no time or timezone and two
equal week-starts always compare and serialize identically. Aware datetimes
are converted to UTC before the calendar date is taken.
"""
from datetime import date, datetime, timedelta, timezone

from kennel.errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"


def today_utc():
    return datetime.now(timezone.utc).date()


def _as_date(value):
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return from_date_string(value)
    raise ValidationError(f"Expected a date, got {value!r}")


def monday_of(value):
    """Return the Monday of the week containing ``value``."""
    d = _as_date(value)
    return d - timedelta(days=d.weekday())


def add_weeks(value, weeks):
    return monday_of(value) + timedelta(weeks=weeks)


def weeks_between(start, end):
    """Whole weeks from the week of ``start`` to the week of ``end``."""
    return (monday_of(end) - monday_of(start)).days // 7


def week_starts(start, count):
    first = monday_of(start)
    return [first + timedelta(weeks=i) for i in range(count)]


def current_week(today=None):
    return monday_of(today if today is not None else today_utc())


def to_date_string(value):
    return _as_date(value).strftime(DATE_FORMAT)


def from_date_string(value):
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def parse_week(value, field="weekStartDate"):
    """Normalize user input (date or ``YYYY-MM-DD``) to its week-start."""
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    return monday_of(value)
