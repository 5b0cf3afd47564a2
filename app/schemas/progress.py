import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.adjustment import Adjustment


class ProgressSampleData(BaseModel):
    """Снимок одной дневной записи пользователя."""
    date: dt.date
    weight: Optional[float] = Field(default=None, gt=0)
    calories_consumed: int = Field(default=0, ge=0)
    workouts_completed: int = Field(default=0, ge=0)
    water_ml: float = Field(default=0, ge=0)
    sleep_hours: float = Field(default=0, ge=0, le=24)
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    energy: Optional[int] = Field(default=None, ge=1, le=5)

    class Config:
        from_attributes = True


class TrendResult(BaseModel):
    slope: float = 0.0  # кг на интервал между точками
    weekly_slope: float = 0.0  # кг/неделю
    confidence: int = Field(default=0, ge=0, le=100)
    sample_count: int = 0
    span_days: int = 0
    variance_score: float = 0.0
    volume_score: float = 0.0
    consistency_score: float = 0.0
    insufficient_data: bool = True


class AdherenceMetrics(BaseModel):
    days_tracked: int = 0
    window_days: int = 0
    logging_consistency: float = 0.0  # %
    workout_adherence: float = 0.0  # %
    meal_adherence: float = 0.0  # %
    workouts_completed: int = 0
    workouts_planned: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    average_sleep_hours: float = 0.0
    average_water_ml: float = 0.0
    average_mood: float = 0.0
    average_energy: float = 0.0
    average_calories: float = 0.0


class PlateauSeverity(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class PlateauResult(BaseModel):
    is_plateau: bool = False
    duration_days: int = 0
    severity: PlateauSeverity = PlateauSeverity.NONE
    severity_level: int = Field(default=0, ge=0, le=3)


class Milestone(BaseModel):
    target_date: dt.date
    projected_value: float
    metric_name: str = "weight"
    fraction_of_goal: float


class EtaStatus(str, Enum):
    ESTIMABLE = "estimable"
    NOT_ESTIMABLE = "not_estimable"


class OutcomePrediction(BaseModel):
    estimable: bool = False
    current_weight: Optional[float] = None
    predicted_weight: Optional[float] = None
    target_date: Optional[dt.date] = None
    milestones: List[Milestone] = []
    eta_status: EtaStatus = EtaStatus.NOT_ESTIMABLE
    eta_date: Optional[dt.date] = None
    eta_weeks: Optional[float] = None
    realistic: bool = False


class MacroPlan(BaseModel):
    calories: int
    profile: str
    protein: int
    carbs: int
    fat: int


class TrendDirection(str, Enum):
    GAINING = "gaining"
    LOSING = "losing"
    MAINTAINING = "maintaining"


class ProgressOverview(BaseModel):
    """Сводные показатели за окно анализа."""
    weight_change_kg: float = 0.0
    weight_change_percentage: float = 0.0
    direction: TrendDirection = TrendDirection.MAINTAINING
    overall_score: float = Field(default=0.0, ge=0, le=100)
    consistency_score: float = Field(default=0.0, ge=0, le=100)


class InsightType(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    ACTION = "action"


class InsightCategory(str, Enum):
    WEIGHT = "weight"
    WORKOUT = "workout"
    NUTRITION = "nutrition"
    LIFESTYLE = "lifestyle"
    GENERAL = "general"


class ProgressInsight(BaseModel):
    type: InsightType
    category: InsightCategory
    title: str
    message: str
    recommendation: Optional[str] = None
    priority: int = Field(default=3, ge=1, le=5)


class WeeklyReport(BaseModel):
    summary: str
    achievements: List[str] = []
    areas_to_improve: List[str] = []
    next_week_goals: List[str] = []


class AnalysisResult(BaseModel):
    trend: TrendResult
    plateau: PlateauResult
    prediction: OutcomePrediction
    adjustments: List[Adjustment]
    adherence: AdherenceMetrics
    days_tracked: int
    milestones: List[Milestone] = []
    macros: Optional[MacroPlan] = None
    overview: ProgressOverview = ProgressOverview()
    insights: List[ProgressInsight] = []
    summary: str = ""
    weekly_report: Optional[WeeklyReport] = None
