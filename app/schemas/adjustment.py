from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class AdjustmentType(str, Enum):
    CALORIE = "calorie"
    WORKOUT_FREQUENCY = "workout_frequency"
    REST = "rest"
    MACRO = "macro"
    DELOAD = "deload"


# Поле GoalParameters, которое меняет корректировка каждого типа
ADJUSTMENT_FIELDS = {
    AdjustmentType.CALORIE: "target_calories",
    AdjustmentType.WORKOUT_FREQUENCY: "workout_days_per_week",
    AdjustmentType.REST: "sleep_target_hours",
    AdjustmentType.MACRO: "macro_profile",
    AdjustmentType.DELOAD: "deload_until",
}


class Adjustment(BaseModel):
    type: AdjustmentType
    reason: str
    description: str
    field: str
    current_value: Optional[Union[int, float, str]] = None
    proposed_new_value: Union[int, float, str]
    priority: int = Field(ge=1, le=5)
    goal_version: int


class AdjustmentHistoryEntry(BaseModel):
    adjustment_type: AdjustmentType
    reason: str
    field: str
    old_value: Optional[str] = None
    new_value: str
    accepted_at: datetime

    class Config:
        from_attributes = True
