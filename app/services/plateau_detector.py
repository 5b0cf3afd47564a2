from typing import Tuple

from app.core.config import settings
from app.models.goal import GoalTypeEnum
from app.schemas.progress import PlateauResult, PlateauSeverity, TrendResult


class PlateauDetector:
    """Плато: вес стоит на месте, хотя цель требует его изменения,
    а пользователь при этом стабильно ведёт дневник."""

    GOAL_WEEKLY_BANDS = settings.GOAL_WEEKLY_BANDS
    PLATEAU_TOLERANCE_KG = settings.PLATEAU_TOLERANCE_KG
    PLATEAU_MIN_DAYS = settings.PLATEAU_MIN_DAYS
    CONSISTENCY_THRESHOLD = settings.PLATEAU_CONSISTENCY_THRESHOLD
    MIN_TREND_SAMPLES = settings.MIN_TREND_SAMPLES

    # (минимальная длительность в днях, уровень, severity), от самого тяжёлого
    SEVERITY_STEPS = (
        (28, 3, PlateauSeverity.SEVERE),
        (21, 2, PlateauSeverity.MODERATE),
        (14, 1, PlateauSeverity.MILD),
    )

    @classmethod
    def expected_band(cls, goal_type: GoalTypeEnum) -> Tuple[float, float]:
        key = goal_type.value if isinstance(goal_type, GoalTypeEnum) else str(goal_type)
        return tuple(cls.GOAL_WEEKLY_BANDS.get(key, cls.GOAL_WEEKLY_BANDS["maintain"]))

    @classmethod
    def expects_change(cls, goal_type: GoalTypeEnum) -> bool:
        low, high = cls.expected_band(goal_type)
        return low > 0 or high < 0

    @classmethod
    def classify_severity(cls, duration_days: int) -> Tuple[int, PlateauSeverity]:
        for min_days, level, severity in cls.SEVERITY_STEPS:
            if duration_days >= min_days:
                return level, severity
        return 0, PlateauSeverity.NONE

    @classmethod
    def detect(
        cls,
        trend: TrendResult,
        goal_type: GoalTypeEnum,
        logging_consistency: float,
    ) -> PlateauResult:
        if not cls.expects_change(goal_type):
            return PlateauResult()

        if trend.sample_count < cls.MIN_TREND_SAMPLES:
            return PlateauResult()

        # Пропуски в дневнике означают отсутствие данных, а не плато
        if logging_consistency < cls.CONSISTENCY_THRESHOLD:
            return PlateauResult()

        if abs(trend.weekly_slope) > cls.PLATEAU_TOLERANCE_KG:
            return PlateauResult()

        if trend.span_days < cls.PLATEAU_MIN_DAYS:
            return PlateauResult()

        level, severity = cls.classify_severity(trend.span_days)
        return PlateauResult(
            is_plateau=True,
            duration_days=trend.span_days,
            severity=severity,
            severity_level=level,
        )
