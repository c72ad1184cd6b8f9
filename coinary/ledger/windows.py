"""Calendar arithmetic for aggregation windows.

All functions work on naive datetimes in the caller's reference calendar.
Weeks always start on Monday, whatever the host locale says.
"""
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple, Union

from coinary.utils.exceptions import ValidationError
from .models import DateWindow, TimeRange, parse_date

END_OF_DAY = time(23, 59, 59, 999000)

DateLike = Union[date, datetime]


def validate_month(month: int) -> None:
    """Reject month numbers outside 1-12."""
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError(f"Month must be an integer between 1 and 12, got {month!r}")


def start_of_day(moment: DateLike) -> datetime:
    return datetime.combine(_as_date(moment), time.min)


def end_of_day(moment: DateLike) -> datetime:
    return datetime.combine(_as_date(moment), END_OF_DAY)


def week_window(reference: DateLike) -> DateWindow:
    """Monday 00:00:00.000 through Sunday 23:59:59.999 of the reference week."""
    day = _as_date(reference)
    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)
    return DateWindow(start=start_of_day(monday), end=end_of_day(sunday))


def month_window(month: int, year: int) -> DateWindow:
    """First instant of the month through its last millisecond."""
    validate_month(month)
    start = datetime(year, month, 1)
    next_month, next_year = (1, year + 1) if month == 12 else (month + 1, year)
    end = datetime(next_year, next_month, 1) - timedelta(milliseconds=1)
    return DateWindow(start=start, end=end)


def time_range_window(time_range: TimeRange, now: Optional[datetime] = None) -> DateWindow:
    """
    Window for a dashboard period.

    The window always ends at the end of the current day; the start is the
    beginning of today, this week's Monday, the 1st of the month, or Jan 1st.
    """
    today = _as_date(now or datetime.now())
    time_range = TimeRange(time_range)

    if time_range is TimeRange.DAY:
        start = today
    elif time_range is TimeRange.WEEK:
        start = today - timedelta(days=today.weekday())
    elif time_range is TimeRange.MONTH:
        start = today.replace(day=1)
    else:
        start = today.replace(month=1, day=1)

    return DateWindow(start=start_of_day(start), end=end_of_day(today))


def previous_month(month: int, year: int) -> Tuple[int, int]:
    validate_month(month)
    return (12, year - 1) if month == 1 else (month - 1, year)


def rolling_months(month: int, year: int, size: int = 3) -> List[Tuple[int, int]]:
    """
    Consecutive (month, year) pairs ending at the target month, oldest first.

    Args:
        month: Target month (1-12)
        year: Target year
        size: Number of months in the window, target included

    Returns:
        Ascending list of (month, year) pairs
    """
    validate_month(month)
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValidationError(f"Window size must be a positive integer, got {size!r}")

    months = [(month, year)]
    while len(months) < size:
        months.insert(0, previous_month(*months[0]))
    return months


def _as_date(moment: DateLike) -> date:
    if isinstance(moment, datetime):
        return moment.date()
    if isinstance(moment, date):
        return moment
    parsed = parse_date(moment)
    if parsed is None:
        raise ValidationError(f"Not a usable reference date: {moment!r}")
    return parsed.date()
