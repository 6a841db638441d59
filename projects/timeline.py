"""
Timeline bucketing for project status reports.

Splits a project window into weekly or monthly periods and computes the
planned/actual/deviation series the status charts plot:
- weekly: Monday-based weeks, planned progress by week number
- overall: calendar months, planned progress by elapsed days
"""

from bisect import bisect_right
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .progress import classify_deviation

WEEKLY = 'weekly'
OVERALL = 'overall'
REPORT_TYPES = (WEEKLY, OVERALL)

# Window used when a project has no start or end date
DEFAULT_MONTHS_BEFORE = 3
DEFAULT_MONTHS_AFTER = 1


@dataclass(frozen=True)
class ReportPeriod:
    kind: str  # "week" or "month"
    label: str
    start: date
    end: date
    planned: float


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def resolve_window(start: Optional[date], end: Optional[date], today: date) -> Tuple[date, date]:
    """Fill a missing start/end with the default window around ``today``."""
    if start is None:
        start = today - relativedelta(months=DEFAULT_MONTHS_BEFORE)
    if end is None:
        end = today + relativedelta(months=DEFAULT_MONTHS_AFTER)
    return start, end


def start_of_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def weekly_periods(start: date, end: date) -> List[ReportPeriod]:
    """
    Monday-based weeks from the week containing ``start`` through ``end``.

    Planned progress of week n (counted in whole weeks from ``start``) is
    n / total_weeks, clamped to 100.
    """
    total_weeks = (end - start).days // 7
    periods = []
    current = start_of_week(start)
    while current <= end:
        week_number = max(0, (current - start).days) // 7 + 1
        planned = week_number / total_weeks * 100 if total_weeks > 0 else 0
        periods.append(ReportPeriod(
            kind='week',
            label=current.strftime('%b %d'),
            start=current,
            end=current + timedelta(days=6),
            planned=_clamp(planned),
        ))
        current += timedelta(days=7)
    return periods


def monthly_periods(start: date, end: date, limit: Optional[int] = None) -> List[ReportPeriod]:
    """
    Calendar months from the month containing ``start`` through ``end``.

    Planned progress is the share of the window elapsed at each month end.
    ``limit`` caps the number of months returned.
    """
    total_days = (end - start).days
    periods = []
    current = start.replace(day=1)
    while current <= end:
        if limit is not None and len(periods) >= limit:
            break
        month_end = current + relativedelta(months=1) - timedelta(days=1)
        elapsed = (month_end - start).days
        planned = elapsed / total_days * 100 if total_days > 0 else 0
        periods.append(ReportPeriod(
            kind='month',
            label=current.strftime('%b %Y'),
            start=current,
            end=month_end,
            planned=_clamp(planned),
        ))
        current += relativedelta(months=1)
    return periods


def build_status_series(
    periods: Iterable[ReportPeriod],
    completion_dates: Iterable[date],
    total: int,
) -> List[dict]:
    """
    Attach actual progress and deviation to every period.

    ``completion_dates`` holds the day each completed ticket reached its
    completed status; a ticket counts for every period ending on or after it.
    """
    completed_days = sorted(completion_dates)
    series = []
    for period in periods:
        if total > 0:
            completed = bisect_right(completed_days, period.end)
            actual = completed / total * 100
        else:
            actual = 0
        deviation = actual - period.planned
        series.append({
            'period': period.label,
            f'{period.kind}_start': period.start.isoformat(),
            f'{period.kind}_end': period.end.isoformat(),
            'planned': round(period.planned, 1),
            'actual': round(actual, 1),
            'deviation': round(deviation, 1),
            'status': classify_deviation(deviation),
        })
    return series


def status_series(
    report_type: str,
    start: Optional[date],
    end: Optional[date],
    today: date,
    completion_dates: Iterable[date],
    total: int,
    max_months: Optional[int] = None,
) -> List[dict]:
    """Build the weekly or overall (monthly) series for one project window."""
    if report_type not in REPORT_TYPES:
        raise ValueError(f'Unknown report type: {report_type!r}')
    start, end = resolve_window(start, end, today)
    if report_type == WEEKLY:
        periods = weekly_periods(start, end)
    else:
        periods = monthly_periods(start, end, limit=max_months)
    return build_status_series(periods, completion_dates, total)
