"""
Reading insights: session aggregation and goal normalization.

Sessions count toward a window only by their start_time. Goals are normalized
two different ways and the two must stay separate:

- period progress compares the current day/week/month against the goal as
  entered (a "30 minutes weekly" goal stays 30),
- daily-equivalent progress compares today against the goal divided down to a
  day (30 minutes weekly -> 4 minutes a day).

The goal-vs-actual chart uses the per-period value.
"""
from datetime import datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Tuple
import logging

from bookspace.models import (
    BookCollectionEntry,
    GoalFrequency,
    GoalType,
    ReadingGoal,
    ReadingSession,
    User,
)
from bookspace.schemas.goal import ReadingGoalResponse
from bookspace.schemas.insights import (
    AllTimeInsights,
    BookMinutes,
    ChartPoint,
    GoalProgress,
    InsightsResponse,
    SessionTotals,
    WindowInsights,
)
from bookspace.services.intervals import (
    Interval,
    day_window,
    goal_buckets,
    month_window,
    period_window,
    week_window,
)
from bookspace.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

# Days used to scale weekly/monthly goals down to a daily-equivalent target
DAYS_PER_PERIOD = {
    GoalFrequency.DAILY: 1,
    GoalFrequency.WEEKLY: 7,
    GoalFrequency.MONTHLY: 30,
}

MINUTE_GOAL_TYPES = {GoalType.MINUTES, GoalType.HOURS}


# ----------------------------
# Session aggregation
# ----------------------------

def iter_sessions(entries: Iterable[BookCollectionEntry]) -> Iterator[Tuple[BookCollectionEntry, ReadingSession]]:
    for entry in entries:
        for session in entry.reading_sessions or []:
            yield entry, session


def sum_sessions(entries: Iterable[BookCollectionEntry], interval: Interval) -> SessionTotals:
    """
    Sum minutes and pages of every session whose start_time lies in the interval.

    A book counts once toward books_read if at least one of its in-window
    sessions has minutes_read > 0.
    """
    minutes = 0
    pages = 0
    books = set()
    for entry, session in iter_sessions(entries):
        if not interval.contains(session.start_time):
            continue
        minutes += session.minutes_read or 0
        pages += session.pages_read or 0
        if (session.minutes_read or 0) > 0:
            books.add(entry.book_id)
    return SessionTotals(minutes_read=minutes, pages_read=pages, books_read=len(books))


def minutes_in_window(entries: Iterable[BookCollectionEntry], interval: Interval) -> int:
    return sum_sessions(entries, interval).minutes_read


def all_time_insights(entries: Iterable[BookCollectionEntry]) -> AllTimeInsights:
    """Totals over every session, plus the books ranked by minutes read."""
    books: List[BookMinutes] = []
    total = 0
    for entry in entries:
        minutes = sum(session.minutes_read or 0 for session in entry.reading_sessions or [])
        total += minutes
        if minutes <= 0:
            continue
        book = entry.book
        books.append(BookMinutes(
            book_id=str(entry.book_id),
            title=book.title if book else "Unknown Book",
            author=", ".join(book.author or []) if book else "Unknown Author",
            minutes=minutes,
            cover_image_url=book.cover_image_url if book else None,
        ))

    books.sort(key=lambda item: item.minutes, reverse=True)
    return AllTimeInsights(
        total_minutes_read=total,
        total_hours_read=int(round_half_up(total / 60)),
        total_books_read=len(books),
        books=books,
    )


def window_insights(entries: Iterable[BookCollectionEntry], interval: Interval) -> WindowInsights:
    totals = sum_sessions(entries, interval)
    return WindowInsights(
        start=interval.start,
        end=interval.end,
        label=interval.label,
        minutes_read=totals.minutes_read,
        pages_read=totals.pages_read,
        books_read=totals.books_read,
        hours_read=int(round_half_up(totals.minutes_read / 60)),
    )


# ----------------------------
# Goal normalization
# ----------------------------

def goal_minutes(goal: Optional[ReadingGoal]) -> Optional[float]:
    """
    Goal target in minutes per goal period, or None for pages/books goals.

    Hours are converted to minutes; the value is NOT divided by the period.
    """
    if goal is None:
        return None
    goal_type = GoalType(goal.type)
    if goal_type not in MINUTE_GOAL_TYPES:
        return None
    target = goal.target or 0
    return target * 60 if goal_type == GoalType.HOURS else target


def daily_equivalent_minutes(goal: Optional[ReadingGoal]) -> float:
    """
    Daily-equivalent minute target for the "today" gauge.

    Weekly goals are divided by 7 and monthly goals by 30, rounded to whole
    minutes; daily goals pass through. Inactive and non-minute goals give 0.
    """
    if goal is None or not goal.is_active:
        return 0
    minutes = goal_minutes(goal)
    if minutes is None:
        return 0
    frequency = GoalFrequency(goal.frequency)
    if frequency == GoalFrequency.DAILY:
        return minutes
    return round_half_up(minutes / DAYS_PER_PERIOD[frequency])


def completion_percentage(actual: float, target: float) -> int:
    """round(actual / target * 100); 0 for a zero target. Not capped at 100."""
    if not target or target <= 0:
        return 0
    return max(0, int(round_half_up(actual / target * 100)))


def _progress(actual: int, target: float) -> GoalProgress:
    percentage = completion_percentage(actual, target)
    return GoalProgress(
        actual_minutes=actual,
        target_minutes=target,
        completion_percentage=percentage,
        display_percentage=min(percentage, 100),
    )


def daily_goal_progress(
    goal: Optional[ReadingGoal],
    entries: Iterable[BookCollectionEntry],
    now: datetime,
) -> GoalProgress:
    """Today's minutes against the daily-equivalent target."""
    return _progress(minutes_in_window(entries, day_window(now)), daily_equivalent_minutes(goal))


def period_goal_progress(
    goal: Optional[ReadingGoal],
    entries: Iterable[BookCollectionEntry],
    now: datetime,
) -> Optional[GoalProgress]:
    """
    Minutes in the current goal period against the un-divided goal target.

    For a weekly goal this is the whole week's sum compared with the weekly
    target; None when there is no active minutes/hours goal.
    """
    if goal is None or not goal.is_active:
        return None
    minutes = goal_minutes(goal)
    if minutes is None:
        return None
    window = period_window(goal.frequency, now)
    return _progress(minutes_in_window(entries, window), minutes)


def goal_chart(
    goal: Optional[ReadingGoal],
    entries: Iterable[BookCollectionEntry],
    now: datetime,
) -> List[ChartPoint]:
    """One point per goal bucket with the actual minutes and the per-period goal."""
    if goal is None or not goal.is_active:
        return []
    minutes = goal_minutes(goal)
    if minutes is None:
        return []
    entries = list(entries)
    return [
        ChartPoint(period=bucket.label, actual=minutes_in_window(entries, bucket), goal=minutes)
        for bucket in goal_buckets(goal.frequency, now)
    ]


# ----------------------------
# Insights page
# ----------------------------

def build_insights(user: User, now: datetime) -> InsightsResponse:
    entries = list(user.book_collection)
    goal = user.reading_goal

    week = week_window(now)
    last_day = week.end - timedelta(days=1)
    week = Interval(week.start, week.end, label=f"{week.start:%b %d} - {last_day:%b %d}")

    response = InsightsResponse(
        reading_goal=ReadingGoalResponse.model_validate(goal) if goal is not None else None,
        today=daily_goal_progress(goal, entries, now),
        period_progress=period_goal_progress(goal, entries, now),
        weekly=window_insights(entries, week),
        monthly=window_insights(entries, month_window(now)),
        all_time=all_time_insights(entries),
        goal_chart=goal_chart(goal, entries, now),
    )
    logger.debug(
        "Built insights for user %s: today=%s min, week=%s min, month=%s min, all_time=%s min",
        user.id,
        response.today.actual_minutes,
        response.weekly.minutes_read,
        response.monthly.minutes_read,
        response.all_time.total_minutes_read,
    )
    return response
