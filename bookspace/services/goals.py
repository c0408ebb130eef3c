import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from bookspace.models import GoalFrequency, GoalType, ReadingGoal, User
from bookspace.services.errors import ValidationFailed

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    """A finite float from a number or numeric string; None otherwise (NaN and infinity included)."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def validate_goal(goal_type: Any, frequency: Any, target: Any) -> Dict[str, str]:
    """Return field -> message for every invalid goal field; empty when valid."""
    errors: Dict[str, str] = {}

    number = _as_number(target)
    if number is None:
        errors["target"] = "Target must be a number"
    elif number <= 0:
        errors["target"] = "Target must be greater than 0"

    allowed_types = [t.value for t in GoalType]
    if goal_type not in allowed_types:
        errors["type"] = f"Goal type must be one of: {', '.join(allowed_types)}"

    allowed_frequencies = [f.value for f in GoalFrequency]
    if frequency not in allowed_frequencies:
        errors["frequency"] = f"Frequency must be one of: {', '.join(allowed_frequencies)}"

    return errors


def set_goal(db: Session, user: User, goal_type: Any, frequency: Any, target: Any, now: Optional[datetime] = None) -> ReadingGoal:
    """Overwrite the user's goal wholesale. Nothing is written when validation fails."""
    errors = validate_goal(goal_type, frequency, target)
    if errors:
        raise ValidationFailed(errors)

    goal = user.reading_goal
    if goal is None:
        goal = ReadingGoal(user_id=user.id)
        db.add(goal)
        user.reading_goal = goal

    goal.type = GoalType(goal_type)
    goal.frequency = GoalFrequency(frequency)
    goal.target = _as_number(target)
    goal.is_active = True
    goal.created_at = now or datetime.utcnow()
    db.commit()
    db.refresh(goal)

    logger.info("Reading goal set for user %s: %s %s %s", user.id, goal.target, goal.type.value, goal.frequency.value)
    return goal


def delete_goal(db: Session, user: User) -> Optional[ReadingGoal]:
    """Deactivate the goal (is_active=False, target=0). No-op without a goal."""
    goal = user.reading_goal
    if goal is None:
        return None
    goal.is_active = False
    goal.target = 0
    db.commit()
    db.refresh(goal)
    logger.info("Reading goal deactivated for user %s", user.id)
    return goal
