"""
Date ranges for report endpoints that require date_from / date_to
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple
import logging

from core.config import settings

logger = logging.getLogger(__name__)

MODES = (
    "static",
    "yearly_by_month",
    "previous_year_by_month",
    "previous_month",
    "current_month",
    "ytd_by_month",
    "last_n_days",
)


@dataclass(frozen=True)
class DateRange:
    date_from: Optional[str]
    date_to: Optional[str]
    label: str

    @property
    def is_complete(self) -> bool:
        return bool(self.date_from and self.date_to)


def _month_end(year: int, month: int) -> date:
    return date(year, month, monthrange(year, month)[1])


def _month_range(year: int, month: int, end: Optional[date] = None) -> DateRange:
    return DateRange(
        date_from=date(year, month, 1).isoformat(),
        date_to=(end or _month_end(year, month)).isoformat(),
        label=f"{year}-{month:02d}",
    )


def month_ranges(start: Tuple[int, int], end: Tuple[int, int]) -> List[DateRange]:
    """
    Whole-month ranges from ``start`` to ``end`` inclusive.

    Args:
        start: (year, month) of the first month
        end: (year, month) of the last month
    """
    year, month = start
    ranges = []
    while (year, month) <= end:
        ranges.append(_month_range(year, month))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return ranges


def calculate_date_ranges(
    mode: Optional[str] = None,
    today: Optional[date] = None,
    year: Optional[int] = None,
    days: Optional[int] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None
) -> List[DateRange]:
    """
    Resolve DATE_RANGE_MODE into the list of ranges to fetch.

    Modes:
        yearly_by_month: 12 months of ``year`` (default: current year)
        previous_year_by_month: 12 months of last year
        previous_month: the whole previous month
        current_month: first of this month to today
        ytd_by_month: each month of this year, the last one ending today
        last_n_days: ``days`` days back to today
        static: DATE_FROM / DATE_TO as configured (may be incomplete)

    Unknown modes fall back to static.
    """
    mode = mode or settings.DATE_RANGE_MODE
    today = today or date.today()

    if mode == "yearly_by_month":
        target = year or settings.DATE_RANGE_YEAR or today.year
        return month_ranges((target, 1), (target, 12))

    if mode == "previous_year_by_month":
        return month_ranges((today.year - 1, 1), (today.year - 1, 12))

    if mode == "previous_month":
        last_day = today.replace(day=1) - timedelta(days=1)
        return [DateRange(
            date_from=last_day.replace(day=1).isoformat(),
            date_to=last_day.isoformat(),
            label="previous_month",
        )]

    if mode == "current_month":
        return [DateRange(
            date_from=today.replace(day=1).isoformat(),
            date_to=today.isoformat(),
            label="current_month",
        )]

    if mode == "ytd_by_month":
        ranges = month_ranges((today.year, 1), (today.year, today.month - 1)) if today.month > 1 else []
        ranges.append(_month_range(today.year, today.month, end=today))
        return ranges

    if mode == "last_n_days":
        n = days or settings.DATE_RANGE_DAYS
        return [DateRange(
            date_from=(today - timedelta(days=n)).isoformat(),
            date_to=today.isoformat(),
            label=f"last_{n}_days",
        )]

    if mode != "static":
        logger.warning(f"Unknown DATE_RANGE_MODE {mode!r}, using static DATE_FROM/DATE_TO")

    return [DateRange(
        date_from=date_from or settings.DATE_FROM,
        date_to=date_to or settings.DATE_TO,
        label="static",
    )]
