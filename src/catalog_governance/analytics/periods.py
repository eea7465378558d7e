"""
Activity period resolution.

Maps a period label to a closed calendar-day interval relative to a
reference instant. Weeks start on Monday. "All Time" resolves to None
(unbounded).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from catalog_governance.core.constants import (
    PERIOD_ALL_TIME,
    PERIOD_CURRENT_WEEK,
    PERIOD_LAST_12_MONTHS,
    PERIOD_LAST_WEEK,
    PERIOD_YEAR_TO_DATE,
    PERIODS,
    ROLLING_PERIOD_DAYS,
)
from catalog_governance.core.exceptions import PeriodError


@dataclass(frozen=True)
class DateRange:
    """Closed interval of calendar days; both ends are inclusive."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def caption(self) -> str:
        return f"{self.start:%Y/%m/%d} - {self.end:%Y/%m/%d}"


def to_day(value: date | datetime) -> date:
    """Truncate a timestamp to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _one_year_before(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # Feb 29 rolls forward to Mar 1 in a non-leap year
        return date(day.year - 1, 3, 1)


def resolve_period(period: str, now: date | datetime | None = None) -> DateRange | None:
    """Resolve a period label to a DateRange, or None for All Time.

    Args:
        period: One of ``PERIODS``
        now: Reference instant (defaults to the current local time)

    Raises:
        PeriodError: If the label is not a known period
    """
    today = to_day(now if now is not None else datetime.now())
    this_monday = today - timedelta(days=today.weekday())

    if period == PERIOD_ALL_TIME:
        return None
    if period == PERIOD_CURRENT_WEEK:
        return DateRange(this_monday, today)
    if period == PERIOD_LAST_WEEK:
        return DateRange(this_monday - timedelta(days=7), this_monday - timedelta(days=1))
    if period in ROLLING_PERIOD_DAYS:
        return DateRange(today - timedelta(days=ROLLING_PERIOD_DAYS[period] - 1), today)
    if period == PERIOD_YEAR_TO_DATE:
        return DateRange(date(today.year, 1, 1), today)
    if period == PERIOD_LAST_12_MONTHS:
        return DateRange(_one_year_before(today) + timedelta(days=1), today)

    raise PeriodError(period, details=f"expected one of: {', '.join(PERIODS)}")


def period_caption(period: str, now: date | datetime | None = None) -> str:
    """Caption shown next to the selected period ("All time" or a date span)."""
    date_range = resolve_period(period, now)
    if date_range is None:
        return "All time"
    return date_range.caption
