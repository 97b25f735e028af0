"""
Calendar helpers for report ranges. Weeks start on Monday and school days
run Monday through Friday.
"""

import calendar
import math
from datetime import date, datetime, timedelta

RANGE_WEEK = 'week'
RANGE_MONTH = 'month'
RANGE_TERM = 'term'
RANGES = (RANGE_WEEK, RANGE_MONTH, RANGE_TERM)

DEFAULT_TERM_LENGTH_DAYS = 90


def start_of_week(day):
    return day - timedelta(days=day.weekday())


def end_of_week(day):
    return start_of_week(day) + timedelta(days=6)


def start_of_month(day):
    return day.replace(day=1)


def end_of_month(day):
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=last)


def each_day(start, end):
    """Every date from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(day):
    return day.weekday() >= 5


def school_days(start, end):
    """Monday-Friday dates in [start, end]."""
    return [d for d in each_day(start, end) if not is_weekend(d)]


def weeks_in_month(day):
    """
    Monday starts of every week that touches the month containing ``day``.
    The first start may fall in the previous month.
    """
    first = start_of_week(start_of_month(day))
    last = end_of_month(day)
    weeks = []
    current = first
    while current <= last:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks


def resolve_range(range_name, today=None, term_start=None, term_length_days=DEFAULT_TERM_LENGTH_DAYS):
    """
    Translate a named range into (start, end) dates.

    'week' and 'month' cover the full calendar week/month around today;
    'term' runs from the configured term start (or ``term_length_days`` ago)
    up to today.
    """
    today = today or date.today()
    if range_name == RANGE_WEEK:
        return start_of_week(today), end_of_week(today)
    if range_name == RANGE_MONTH:
        return start_of_month(today), end_of_month(today)
    if range_name == RANGE_TERM:
        if term_start and term_start <= today:
            return term_start, today
        return today - timedelta(days=term_length_days), today
    raise ValueError(f"Unknown range: {range_name}")


def parse_date(value, default=None):
    """Parse an ISO ``YYYY-MM-DD`` string; blank values give ``default``."""
    if value is None:
        return default
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        return default
    return datetime.strptime(value, '%Y-%m-%d').date()


def display_day(day):
    """'Mon, Jan 5' style label."""
    return f"{day.strftime('%a, %b')} {day.day}"


def display_month_day(day):
    """'Jan 5' style label."""
    return f"{day.strftime('%b')} {day.day}"


def round_half_up(value):
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def percentage(part, whole):
    """Whole-number percentage rounded half up; 0 when whole is 0."""
    if not whole:
        return 0
    return round_half_up(part * 100 / whole)
