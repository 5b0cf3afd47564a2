from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.goal import GoalTypeEnum, ActivityLevelEnum


class GoalParametersData(BaseModel):
    """Снимок активной цели пользователя. Анализ только читает его."""
    user_id: int
    goal_type: GoalTypeEnum
    target_weight: Optional[float] = Field(default=None, gt=0)
    target_date: Optional[date] = None
    target_calories: int = Field(gt=0)
    tdee: int = Field(gt=0)
    workout_days_per_week: int = Field(default=3, ge=0, le=7)
    activity_level: ActivityLevelEnum = ActivityLevelEnum.moderate
    start_date: date
    macro_profile: str = "balanced"
    sleep_target_hours: float = 7.0
    deload_until: Optional[date] = None
    version: int = 1
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
