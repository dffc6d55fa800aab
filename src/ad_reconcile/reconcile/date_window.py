"""Effective-date window filtering."""

import calendar
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Protocol

from ..core.logging import get_logger

logger = get_logger("date_window")


class DateRange(Enum):
    """Named look-back windows; ALL disables filtering."""
    LAST_YEAR = "LastYear"
    LAST_QUARTER = "LastQuarter"
    LAST_MONTH = "LastMonth"
    LAST_WEEK = "LastWeek"
    LAST_DAY = "LastDay"
    ALL = "All"

    @classmethod
    def is_known(cls, value: Optional[str]) -> bool:
        if value is None:
            return False
        text = value.strip().lower()
        return any(member.value.lower() == text for member in cls)

    @classmethod
    def parse(cls, value: Optional[str]) -> "DateRange":
        """
        Resolve a range name such as ``LastWeek`` (case-insensitive).
        
        None, blank and unrecognized names resolve to ALL.
        """
        if isinstance(value, cls):
            return value
        if value is None or not value.strip():
            return cls.ALL
        text = value.strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        logger.warning(f"Unrecognized date range '{value}', processing all records")
        return cls.ALL


class HasEffectiveDate(Protocol):
    status_effective_date: date


def subtract_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` back by calendar months, clamping to the end of shorter months."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(date_range: DateRange, now: datetime) -> Optional[datetime]:
    """Return the earliest moment inside ``date_range``, or None for ALL."""
    if date_range is DateRange.LAST_YEAR:
        return subtract_months(now, 12)
    if date_range is DateRange.LAST_QUARTER:
        return subtract_months(now, 3)
    if date_range is DateRange.LAST_MONTH:
        return subtract_months(now, 1)
    if date_range is DateRange.LAST_WEEK:
        return now - timedelta(days=7)
    if date_range is DateRange.LAST_DAY:
        return now - timedelta(days=1)
    return None


def in_window(effective: date, start: Optional[datetime], now: datetime) -> bool:
    """True if ``effective`` (taken at midnight) lies in ``[start, now]``."""
    moment = datetime.combine(effective, time.min, tzinfo=now.tzinfo)
    if moment > now:
        return False
    return start is None or moment >= start


def filter_by_date_window(records: Iterable[HasEffectiveDate], date_range: DateRange,
                          now: datetime) -> List[HasEffectiveDate]:
    """
    Sort records newest effective date first and keep those inside the window.
    
    The sort is stable, so records sharing a date keep their input order.
    With DateRange.ALL every record passes.
    """
    ordered = sorted(records, key=lambda record: record.status_effective_date, reverse=True)
    start = window_start(date_range, now)
    if start is None:
        return ordered
    
    selected = [record for record in ordered if in_window(record.status_effective_date, start, now)]
    logger.debug(f"{date_range.value} window from {start.isoformat()} kept {len(selected)}/{len(ordered)} records")
    return selected
