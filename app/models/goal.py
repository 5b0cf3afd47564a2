import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Enum
from app.core.base import Base

class GoalTypeEnum(str, enum.Enum):
    reduce_weight = "reduce_weight"
    build_muscle = "build_muscle"
    maintain = "maintain"
    increase_strength = "increase_strength"
    improve_endurance = "improve_endurance"

class ActivityLevelEnum(str, enum.Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    very_active = "very_active"

class GoalParameters(Base):
    __tablename__ = "goal_parameters"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, unique=True, nullable=False, index=True)
    goal_type = Column(Enum(GoalTypeEnum), nullable=False)
    target_weight = Column(Float, nullable=True)
    target_date = Column(Date, nullable=True)
    target_calories = Column(Integer, nullable=False)
    tdee = Column(Integer, nullable=False)
    workout_days_per_week = Column(Integer, default=3, nullable=False)
    activity_level = Column(Enum(ActivityLevelEnum), default=ActivityLevelEnum.moderate, nullable=False)
    start_date = Column(Date, nullable=False)
    macro_profile = Column(String, default="balanced", nullable=False)
    sleep_target_hours = Column(Float, default=7.0, nullable=False)
    deload_until = Column(Date, nullable=True)
    # Увеличивается при каждой записи, используется для compare-and-swap
    version = Column(Integer, default=1, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
