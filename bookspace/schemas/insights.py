from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from bookspace.schemas.goal import ReadingGoalResponse


class SessionTotals(BaseModel):
    minutes_read: int = 0
    pages_read: int = 0
    books_read: int = 0


class GoalProgress(BaseModel):
    actual_minutes: int
    target_minutes: float
    completion_percentage: int  # uncapped
    display_percentage: int  # clamped to 100 for gauges


class ChartPoint(BaseModel):
    period: str
    actual: int
    goal: float


class BookMinutes(BaseModel):
    book_id: str
    title: str
    author: str
    minutes: int
    cover_image_url: Optional[str] = None


class WindowInsights(BaseModel):
    start: datetime
    end: datetime
    label: str
    minutes_read: int
    pages_read: int
    books_read: int
    hours_read: int  # rounded, for "that's approximately N hours"


class AllTimeInsights(BaseModel):
    total_minutes_read: int
    total_hours_read: int
    total_books_read: int
    books: List[BookMinutes]


class InsightsResponse(BaseModel):
    reading_goal: Optional[ReadingGoalResponse] = None
    today: GoalProgress
    period_progress: Optional[GoalProgress] = None
    weekly: WindowInsights
    monthly: WindowInsights
    all_time: AllTimeInsights
    goal_chart: List[ChartPoint]
