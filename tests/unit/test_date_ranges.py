"""
Unit tests for report date range resolution
"""

import pytest
from datetime import date
from core.config import settings
from ingestion.date_ranges import DateRange, calculate_date_ranges, month_ranges

TODAY = date(2025, 3, 17)


def test_month_ranges_span_years():
    ranges = month_ranges((2024, 11), (2025, 2))

    assert [r.label for r in ranges] == ["2024-11", "2024-12", "2025-01", "2025-02"]
    assert ranges[3] == DateRange("2025-02-01", "2025-02-28", "2025-02")


def test_month_ranges_handle_leap_years():
    assert month_ranges((2024, 2), (2024, 2))[0].date_to == "2024-02-29"


class TestCalculateDateRanges:

    def test_yearly_by_month(self):
        ranges = calculate_date_ranges("yearly_by_month", today=TODAY, year=2024)

        assert len(ranges) == 12
        assert ranges[0].date_from == "2024-01-01"
        assert ranges[-1].date_to == "2024-12-31"

    def test_previous_year_by_month(self):
        ranges = calculate_date_ranges("previous_year_by_month", today=TODAY)

        assert ranges[0].label == "2024-01"
        assert ranges[-1].label == "2024-12"

    def test_previous_month(self):
        assert calculate_date_ranges("previous_month", today=TODAY) == [
            DateRange("2025-02-01", "2025-02-28", "previous_month")
        ]

    def test_previous_month_in_january(self):
        [range_] = calculate_date_ranges("previous_month", today=date(2025, 1, 5))

        assert (range_.date_from, range_.date_to) == ("2024-12-01", "2024-12-31")

    def test_current_month(self):
        assert calculate_date_ranges("current_month", today=TODAY) == [
            DateRange("2025-03-01", "2025-03-17", "current_month")
        ]

    def test_ytd_by_month_ends_today(self):
        ranges = calculate_date_ranges("ytd_by_month", today=TODAY)

        assert [r.label for r in ranges] == ["2025-01", "2025-02", "2025-03"]
        assert ranges[-1].date_to == "2025-03-17"

    def test_ytd_in_january(self):
        ranges = calculate_date_ranges("ytd_by_month", today=date(2025, 1, 9))

        assert ranges == [DateRange("2025-01-01", "2025-01-09", "2025-01")]

    def test_last_n_days(self):
        [range_] = calculate_date_ranges("last_n_days", today=TODAY, days=7)

        assert (range_.date_from, range_.date_to) == ("2025-03-10", "2025-03-17")
        assert range_.label == "last_7_days"

    def test_static(self):
        [range_] = calculate_date_ranges("static", date_from="2024-01-01", date_to="2024-01-31")

        assert range_.is_complete

    @pytest.mark.parametrize("mode", ["static", "fortnightly"])
    def test_static_without_dates_is_incomplete(self, mode, monkeypatch):
        monkeypatch.setattr(settings, "DATE_FROM", None)
        monkeypatch.setattr(settings, "DATE_TO", None)

        [range_] = calculate_date_ranges(mode, today=TODAY)

        assert range_.label == "static"
        assert not range_.is_complete
