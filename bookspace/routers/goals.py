from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import logging

from bookspace.database import get_db
from bookspace.core.auth import get_current_user
from bookspace.models import User
from bookspace.schemas.goal import ReadingGoalRequest, ReadingGoalResponse
from bookspace.services import goals as goal_service
from bookspace.utils.instrumentation import log_event
from bookspace.utils.timing import current_time

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reading-goal", tags=["reading-goal"])


@router.get("", response_model=Optional[ReadingGoalResponse])
async def get_reading_goal(user: User = Depends(get_current_user)):
    return user.reading_goal


@router.put("", response_model=ReadingGoalResponse)
async def set_reading_goal(
    payload: ReadingGoalRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(current_time),
):
    """
    Set (overwrite) the reading goal.

    Invalid input is rejected with 400 and a field -> message map under
    "errors"; the stored goal is left untouched in that case.
    """
    goal = goal_service.set_goal(db, user, payload.type, payload.frequency, payload.target, now=now)

    log_event(
        db=db,
        event_name="reading_goal_set",
        user_id=user.id,
        properties={"type": goal.type.value, "frequency": goal.frequency.value, "target": goal.target},
    )
    db.commit()
    return goal


@router.delete("", response_model=Optional[ReadingGoalResponse])
async def delete_reading_goal(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = goal_service.delete_goal(db, user)
    if goal is not None:
        log_event(db=db, event_name="reading_goal_deleted", user_id=user.id)
        db.commit()
    return goal
