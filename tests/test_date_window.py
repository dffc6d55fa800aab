"""Tests for effective-date window filtering."""

import pytest
from datetime import date, datetime, timedelta

from ad_reconcile.hr.source import EmployeeRecord
from ad_reconcile.reconcile.date_window import (
    DateRange,
    filter_by_date_window,
    subtract_months,
    window_start,
)

NOW = datetime(2026, 3, 31, 15, 0)


def record(name, days_ago):
    return EmployeeRecord(name, "Test", "Terminated", (NOW - timedelta(days=days_ago)).date())


@pytest.fixture
def records():
    return [record(f"E{days}", days) for days in (400, 100, 40, 20, 6, 3, 0, -2)]


class TestDateRange:
    
    @pytest.mark.parametrize("value, expected", [
        ("LastYear", DateRange.LAST_YEAR),
        ("lastquarter", DateRange.LAST_QUARTER),
        ("LASTMONTH", DateRange.LAST_MONTH),
        (" LastWeek ", DateRange.LAST_WEEK),
        ("LastDay", DateRange.LAST_DAY),
        ("All", DateRange.ALL),
        (None, DateRange.ALL),
        ("", DateRange.ALL),
        ("LastDecade", DateRange.ALL),
    ])
    def test_parse(self, value, expected):
        assert DateRange.parse(value) is expected
    
    def test_parse_unknown_logs_warning(self, caplog):
        DateRange.parse("Yesterday")
        assert "Unrecognized date range 'Yesterday'" in caplog.text
    
    def test_is_known(self):
        assert DateRange.is_known("lastweek")
        assert not DateRange.is_known("fortnight")
        assert not DateRange.is_known(None)


class TestWindowStart:
    
    def test_fixed_windows(self):
        assert window_start(DateRange.LAST_WEEK, NOW) == NOW - timedelta(days=7)
        assert window_start(DateRange.LAST_DAY, NOW) == NOW - timedelta(days=1)
        assert window_start(DateRange.ALL, NOW) is None
    
    def test_month_windows_clamp_to_month_end(self):
        assert window_start(DateRange.LAST_MONTH, NOW) == datetime(2026, 2, 28, 15, 0)
        assert window_start(DateRange.LAST_QUARTER, NOW) == datetime(2025, 12, 31, 15, 0)
        assert window_start(DateRange.LAST_YEAR, NOW) == datetime(2025, 3, 31, 15, 0)
    
    def test_subtract_months_across_year(self):
        assert subtract_months(datetime(2026, 1, 15), 1) == datetime(2025, 12, 15)
        assert subtract_months(datetime(2024, 2, 29), 12) == datetime(2023, 2, 28)


class TestFilter:
    
    def test_all_sorts_and_keeps_everything(self, records):
        result = filter_by_date_window(records, DateRange.ALL, NOW)
        
        assert len(result) == len(records)
        dates = [r.status_effective_date for r in result]
        assert dates == sorted(dates, reverse=True)
    
    def test_last_week(self, records):
        result = filter_by_date_window(records, DateRange.LAST_WEEK, NOW)
        assert [r.first_name for r in result] == ["E0", "E3", "E6"]
    
    def test_future_dates_excluded(self, records):
        result = filter_by_date_window(records, DateRange.LAST_YEAR, NOW)
        assert "E-2" not in [r.first_name for r in result]
        assert "E400" not in [r.first_name for r in result]
    
    def test_last_day_excludes_yesterday_midnight(self):
        yesterday = record("Y", 1)
        today = record("T", 0)
        
        result = filter_by_date_window([yesterday, today], DateRange.LAST_DAY, NOW)
        
        assert [r.first_name for r in result] == ["T"]
    
    def test_equivalent_to_date_predicate(self, records):
        start = NOW - timedelta(days=7)
        unfiltered = filter_by_date_window(records, DateRange.ALL, NOW)
        expected = [
            r for r in unfiltered
            if start <= datetime.combine(r.status_effective_date, datetime.min.time()) <= NOW
        ]
        
        assert filter_by_date_window(records, DateRange.LAST_WEEK, NOW) == expected
    
    def test_stable_for_equal_dates(self):
        first = EmployeeRecord("A", "One", "Terminated", date(2026, 3, 30))
        second = EmployeeRecord("B", "Two", "Terminated", date(2026, 3, 30))
        
        result = filter_by_date_window([first, second], DateRange.LAST_WEEK, NOW)
        
        assert result == [first, second]
