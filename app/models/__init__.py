from app.models.progress import ProgressSample
from app.models.goal import GoalParameters, GoalTypeEnum, ActivityLevelEnum
from app.models.adjustment import AdjustmentHistory

__all__ = [
    "ProgressSample",
    "GoalParameters", "GoalTypeEnum", "ActivityLevelEnum",
    "AdjustmentHistory"
]
