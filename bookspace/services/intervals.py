"""
Time windows for reading insights.

All windows are half-open [start, end) and built from naive UTC datetimes,
the same clock the reading sessions are stamped with.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from bookspace.core.config import settings
from bookspace.models import GoalFrequency

DAILY_BUCKETS = 7
WEEKLY_BUCKETS = 4
MONTHLY_BUCKETS = 6


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime
    label: str = ""

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment < self.end


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment: datetime, week_starts_on: Optional[int] = None) -> datetime:
    if week_starts_on is None:
        week_starts_on = settings.WEEK_STARTS_ON
    offset = (moment.weekday() - week_starts_on) % 7
    return start_of_day(moment) - timedelta(days=offset)


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment).replace(day=1)


def shift_months(month_start: datetime, months: int) -> datetime:
    """Move a first-of-month datetime by a (possibly negative) number of months."""
    index = month_start.year * 12 + (month_start.month - 1) + months
    return month_start.replace(year=index // 12, month=index % 12 + 1, day=1)


def day_window(now: datetime) -> Interval:
    start = start_of_day(now)
    return Interval(start, start + timedelta(days=1), label=start.strftime("%a"))


def week_window(now: datetime, week_starts_on: Optional[int] = None) -> Interval:
    start = start_of_week(now, week_starts_on)
    return Interval(start, start + timedelta(days=7))


def month_window(now: datetime) -> Interval:
    start = start_of_month(now)
    return Interval(start, shift_months(start, 1), label=start.strftime("%b"))


def period_window(frequency, now: datetime, week_starts_on: Optional[int] = None) -> Interval:
    """The window of the current goal period (today, this week or this month)."""
    frequency = GoalFrequency(frequency)
    if frequency == GoalFrequency.DAILY:
        return day_window(now)
    if frequency == GoalFrequency.WEEKLY:
        return week_window(now, week_starts_on)
    return month_window(now)


def goal_buckets(frequency, now: datetime, week_starts_on: Optional[int] = None) -> List[Interval]:
    """
    Historical buckets for the goal-vs-actual chart, oldest first.

    daily -> the last 7 days labeled by weekday, weekly -> the last 4 weeks
    labeled "Week 1".."Week 4", monthly -> the last 6 months labeled by month.
    Raises ValueError for an unknown frequency.
    """
    frequency = GoalFrequency(frequency)
    buckets: List[Interval] = []

    if frequency == GoalFrequency.DAILY:
        today = start_of_day(now)
        for i in range(DAILY_BUCKETS - 1, -1, -1):
            start = today - timedelta(days=i)
            buckets.append(Interval(start, start + timedelta(days=1), label=start.strftime("%a")))
    elif frequency == GoalFrequency.WEEKLY:
        this_week = start_of_week(now, week_starts_on)
        for i in range(WEEKLY_BUCKETS - 1, -1, -1):
            start = this_week - timedelta(weeks=i)
            buckets.append(Interval(start, start + timedelta(days=7), label=f"Week {WEEKLY_BUCKETS - i}"))
    else:
        this_month = start_of_month(now)
        for i in range(MONTHLY_BUCKETS - 1, -1, -1):
            start = shift_months(this_month, -i)
            buckets.append(Interval(start, shift_months(start, 1), label=start.strftime("%b")))

    return buckets
