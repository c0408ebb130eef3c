from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from bookspace.core.auth import get_current_user
from bookspace.core.config import settings
from bookspace.models import User
from bookspace.schemas.insights import InsightsResponse
from bookspace.services.insights import build_insights
from bookspace.utils.timing import current_time, time_operation

logger = logging.getLogger(__name__)
router = APIRouter(tags=["insights"])


@router.get("/insights", response_model=InsightsResponse)
async def get_insights(
    user: User = Depends(get_current_user),
    now: datetime = Depends(current_time),
):
    """
    Reading insights for the current user:

    - today: today's minutes against the daily-equivalent goal (gauge)
    - period_progress: this day/week/month against the goal as entered
    - weekly / monthly: minutes, pages and books in the current week and month
    - all_time: totals and books ranked by minutes read
    - goal_chart: actual vs goal per bucket (7 days, 4 weeks or 6 months)
    """
    log_fn = logger.info if settings.DEBUG else None
    with time_operation(f"insights user={user.id}", log_fn=log_fn):
        return build_insights(user, now)
