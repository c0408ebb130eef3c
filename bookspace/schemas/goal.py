from pydantic import BaseModel
from typing import Any
from datetime import datetime
from bookspace.models import GoalType, GoalFrequency


class ReadingGoalRequest(BaseModel):
    # Checked by services.goals.validate_goal
    type: Any = None
    frequency: Any = None
    target: Any = None


class ReadingGoalResponse(BaseModel):
    type: GoalType
    frequency: GoalFrequency
    target: float
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
