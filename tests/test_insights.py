"""Tests for session aggregation and goal normalization."""
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from bookspace.models import (
    Book,
    BookCollectionEntry,
    GoalFrequency,
    GoalType,
    ReadingGoal,
    ReadingSession,
)
from bookspace.services.insights import (
    all_time_insights,
    completion_percentage,
    daily_equivalent_minutes,
    daily_goal_progress,
    goal_chart,
    goal_minutes,
    minutes_in_window,
    period_goal_progress,
    sum_sessions,
)
from bookspace.services.intervals import Interval, day_window, month_window, week_window
from bookspace.utils.rounding import round_half_up

NOW = datetime(2024, 5, 15, 12, 0)  # Wednesday


def _session(start, minutes, pages=0, end=None):
    return ReadingSession(
        start_time=start,
        end_time=end if end is not None else (start + timedelta(minutes=minutes) if start else None),
        minutes_read=minutes,
        pages_read=pages,
    )


def _entry(*sessions, title="Book", author=None, with_book=True):
    book_id = uuid4()
    book = None
    if with_book:
        book = Book(id=book_id, title=title, author=author or ["Author"], page_count=300)
    return BookCollectionEntry(book_id=book_id, book=book, reading_sessions=list(sessions))


def _goal(target, goal_type=GoalType.MINUTES, frequency=GoalFrequency.DAILY, active=True):
    return ReadingGoal(type=goal_type, frequency=frequency, target=target, is_active=active)


# ----------------------------
# Rounding
# ----------------------------

@pytest.mark.parametrize(
    "value, ndigits, expected",
    [
        (2.5, 0, 3),
        (0.5, 0, 1),
        (4.25, 1, 4.3),
        (4.35, 1, 4.4),
        (13 / 3, 1, 4.3),
        (4.2857, 0, 4),
    ],
)
def test_round_half_up(value, ndigits, expected):
    assert round_half_up(value, ndigits) == expected


# ----------------------------
# Aggregation
# ----------------------------

def test_sum_sessions_counts_only_sessions_starting_in_window():
    today = day_window(NOW)
    entries = [
        _entry(
            _session(datetime(2024, 5, 15, 8), 20, pages=10),
            _session(datetime(2024, 5, 15, 21), 15, pages=5),
            _session(datetime(2024, 5, 14, 22), 30, pages=12),
        ),
    ]

    totals = sum_sessions(entries, today)

    assert totals.minutes_read == 35
    assert totals.pages_read == 15
    assert totals.books_read == 1


def test_end_time_is_ignored_for_window_membership():
    today = day_window(NOW)
    # Started yesterday, ended today: belongs to yesterday
    overnight = _session(datetime(2024, 5, 14, 23, 30), 60, end=datetime(2024, 5, 15, 0, 30))
    entries = [_entry(overnight)]

    assert minutes_in_window(entries, today) == 0
    assert minutes_in_window(entries, day_window(datetime(2024, 5, 14))) == 60


def test_sessions_without_start_time_never_count():
    entries = [_entry(_session(None, 40, pages=20))]

    assert sum_sessions(entries, month_window(NOW)).minutes_read == 0
    assert sum_sessions(entries, Interval(datetime(1970, 1, 1), datetime(2100, 1, 1))).minutes_read == 0


def test_books_read_counts_each_book_once_and_needs_minutes():
    week = week_window(NOW, week_starts_on=6)
    entries = [
        _entry(_session(datetime(2024, 5, 13, 9), 10), _session(datetime(2024, 5, 14, 9), 10)),
        _entry(_session(datetime(2024, 5, 13, 10), 0, pages=3)),
        _entry(_session(datetime(2024, 5, 1, 10), 25)),
    ]

    totals = sum_sessions(entries, week)

    assert totals.minutes_read == 20
    assert totals.pages_read == 3
    assert totals.books_read == 1


def test_larger_window_never_sums_less():
    entries = [
        _entry(
            _session(datetime(2024, 5, 15, 7), 12),
            _session(datetime(2024, 5, 13, 7), 30),
            _session(datetime(2024, 5, 2, 7), 45),
            _session(datetime(2024, 4, 30, 7), 50),
        ),
    ]
    day = day_window(NOW)
    week = week_window(NOW, week_starts_on=6)
    month = month_window(NOW)

    assert week.start <= day.start and day.end <= week.end
    assert month.start <= week.start and week.end <= month.end
    assert minutes_in_window(entries, day) == 12
    assert minutes_in_window(entries, week) == 42
    assert minutes_in_window(entries, month) == 87


def test_all_time_insights_ranks_books_by_minutes():
    entries = [
        _entry(_session(datetime(2024, 1, 1), 30), title="Short", author=["A. Writer"]),
        _entry(_session(datetime(2024, 2, 1), 50), _session(datetime(2024, 3, 1), 40), title="Long"),
        _entry(_session(datetime(2024, 2, 1), 0), title="Untouched"),
        _entry(_session(datetime(2024, 4, 1), 10), with_book=False),
    ]

    result = all_time_insights(entries)

    assert result.total_minutes_read == 130
    assert result.total_hours_read == 2
    assert result.total_books_read == 3
    assert [b.title for b in result.books] == ["Long", "Short", "Unknown Book"]
    assert result.books[1].author == "A. Writer"
    assert result.books[2].author == "Unknown Author"


# ----------------------------
# Goal normalization
# ----------------------------

def test_completion_percentage():
    assert completion_percentage(45, 60) == 75
    assert completion_percentage(20, 30) == 67
    assert completion_percentage(90, 60) == 150
    assert completion_percentage(10, 0) == 0


def test_goal_minutes_converts_hours_without_dividing():
    assert goal_minutes(_goal(30, frequency=GoalFrequency.WEEKLY)) == 30
    assert goal_minutes(_goal(2, goal_type=GoalType.HOURS, frequency=GoalFrequency.MONTHLY)) == 120
    assert goal_minutes(_goal(50, goal_type=GoalType.PAGES)) is None
    assert goal_minutes(None) is None


@pytest.mark.parametrize(
    "goal, expected",
    [
        (_goal(60), 60),
        (_goal(30, frequency=GoalFrequency.WEEKLY), 4),
        (_goal(70, frequency=GoalFrequency.WEEKLY), 10),
        (_goal(10, goal_type=GoalType.HOURS, frequency=GoalFrequency.MONTHLY), 20),
        (_goal(45, frequency=GoalFrequency.MONTHLY), 2),
        (_goal(3, goal_type=GoalType.BOOKS, frequency=GoalFrequency.MONTHLY), 0),
        (_goal(60, active=False), 0),
        (None, 0),
    ],
)
def test_daily_equivalent_minutes(goal, expected):
    assert daily_equivalent_minutes(goal) == expected


def test_daily_goal_progress():
    entries = [_entry(_session(datetime(2024, 5, 15, 7), 45))]

    progress = daily_goal_progress(_goal(60), entries, NOW)

    assert progress.actual_minutes == 45
    assert progress.target_minutes == 60
    assert progress.completion_percentage == 75
    assert progress.display_percentage == 75


def test_weekly_goal_period_progress_uses_undivided_target():
    goal = _goal(30, frequency=GoalFrequency.WEEKLY)
    entries = [
        _entry(
            _session(datetime(2024, 5, 12, 9), 12),  # Sunday, first day of the week
            _session(datetime(2024, 5, 15, 9), 8),
        ),
    ]

    period = period_goal_progress(goal, entries, NOW)
    today = daily_goal_progress(goal, entries, NOW)

    assert period.target_minutes == 30
    assert period.actual_minutes == 20
    assert period.completion_percentage == 67

    assert today.target_minutes == 4
    assert today.actual_minutes == 8
    assert today.completion_percentage == 200
    assert today.display_percentage == 100


def test_period_progress_absent_without_active_minute_goal():
    entries = [_entry(_session(datetime(2024, 5, 15, 7), 45))]

    assert period_goal_progress(None, entries, NOW) is None
    assert period_goal_progress(_goal(60, active=False), entries, NOW) is None
    assert period_goal_progress(_goal(20, goal_type=GoalType.PAGES), entries, NOW) is None


def test_no_goal_gives_zero_completion():
    entries = [_entry(_session(datetime(2024, 5, 15, 7), 45))]

    progress = daily_goal_progress(None, entries, NOW)

    assert progress.actual_minutes == 45
    assert progress.completion_percentage == 0


def test_daily_goal_chart():
    entries = [
        _entry(
            _session(datetime(2024, 5, 9, 20), 15),
            _session(datetime(2024, 5, 15, 7), 45),
            _session(datetime(2024, 5, 8, 7), 99),  # outside the 7 buckets
        ),
    ]

    chart = goal_chart(_goal(30), entries, NOW)

    assert [p.period for p in chart] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]
    assert [p.actual for p in chart] == [15, 0, 0, 0, 0, 0, 45]
    assert all(p.goal == 30 for p in chart)


def test_monthly_hours_goal_chart_uses_per_period_target():
    entries = [_entry(_session(datetime(2024, 4, 10), 200), _session(datetime(2024, 5, 3), 100))]
    goal = _goal(5, goal_type=GoalType.HOURS, frequency=GoalFrequency.MONTHLY)

    chart = goal_chart(goal, entries, NOW)

    assert len(chart) == 6
    assert chart[-2].period == "Apr" and chart[-2].actual == 200
    assert chart[-1].period == "May" and chart[-1].actual == 100
    assert all(p.goal == 300 for p in chart)


def test_goal_chart_empty_without_minute_goal():
    entries = [_entry(_session(datetime(2024, 5, 15, 7), 45))]

    assert goal_chart(None, entries, NOW) == []
    assert goal_chart(_goal(100, goal_type=GoalType.PAGES), entries, NOW) == []
