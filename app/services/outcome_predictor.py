import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Tuple

from app.core.exceptions import NotEstimableError
from app.schemas.progress import (
    EtaStatus, Milestone, OutcomePrediction, TrendResult
)

logger = logging.getLogger(__name__)


class OutcomePredictor:
    MILESTONE_FRACTIONS = (0.25, 0.5, 0.75, 1.0)
    # Реалистичный темп: 0.25-1 кг в неделю
    REALISTIC_WEEKLY_RANGE = (0.25, 1.0)

    @staticmethod
    def days_until(target_date: date, today: date) -> int:
        return max(0, math.ceil((target_date - today).days))

    @staticmethod
    def predict_weight(current_weight: float, weekly_slope: float, days_ahead: int) -> float:
        weeks_ahead = days_ahead / 7
        return round(current_weight + weekly_slope * weeks_ahead, 1)

    @classmethod
    def generate_milestones(
        cls,
        current_weight: float,
        weekly_slope: float,
        days_to_goal: int,
        today: date,
    ) -> List[Milestone]:
        # Без округления: иначе при малом наклоне соседние точки сливаются
        total_change = weekly_slope * days_to_goal / 7
        return [
            Milestone(
                target_date=today + timedelta(days=round(days_to_goal * fraction)),
                projected_value=current_weight + total_change * fraction,
                metric_name="weight",
                fraction_of_goal=fraction,
            )
            for fraction in cls.MILESTONE_FRACTIONS
        ]

    @classmethod
    def estimate_time_to_goal(
        cls,
        current_weight: float,
        target_weight: float,
        weekly_slope: float,
        today: date,
    ) -> Tuple[float, date, bool]:
        """Сколько недель до цели при текущем темпе: (недели, дата, реалистично ли)."""
        total_change = target_weight - current_weight
        if weekly_slope == 0:
            raise NotEstimableError("Вес не меняется — срок достижения цели не определён")
        if total_change != 0 and (total_change > 0) != (weekly_slope > 0):
            raise NotEstimableError("Тренд направлен от цели")

        weeks = abs(total_change / weekly_slope)
        eta_date = today + timedelta(days=math.ceil(weeks * 7))
        low, high = cls.REALISTIC_WEEKLY_RANGE
        realistic = low <= abs(weekly_slope) <= high
        return round(weeks, 1), eta_date, realistic

    @classmethod
    def predict(
        cls,
        current_weight: Optional[float],
        trend: TrendResult,
        today: date,
        target_date: Optional[date] = None,
        target_weight: Optional[float] = None,
    ) -> OutcomePrediction:
        if current_weight is None or trend.sample_count < 2:
            return OutcomePrediction(current_weight=current_weight, target_date=target_date)

        eta_weeks = None
        eta_date = None
        realistic = False
        eta_status = EtaStatus.NOT_ESTIMABLE
        if target_weight is not None:
            try:
                eta_weeks, eta_date, realistic = cls.estimate_time_to_goal(
                    current_weight, target_weight, trend.weekly_slope, today
                )
                eta_status = EtaStatus.ESTIMABLE
            except NotEstimableError as e:
                logger.info(f"ETA не рассчитан: {e}")
        elif trend.weekly_slope == 0:
            logger.info("ETA не рассчитан: нулевой тренд")

        horizon = target_date or eta_date
        if horizon is None:
            return OutcomePrediction(
                current_weight=current_weight,
                eta_status=eta_status,
            )

        days_to_goal = cls.days_until(horizon, today)
        predicted_weight = cls.predict_weight(current_weight, trend.weekly_slope, days_to_goal)

        return OutcomePrediction(
            estimable=True,
            current_weight=current_weight,
            predicted_weight=predicted_weight,
            target_date=horizon,
            milestones=cls.generate_milestones(current_weight, trend.weekly_slope, days_to_goal, today),
            eta_status=eta_status,
            eta_date=eta_date,
            eta_weeks=eta_weeks,
            realistic=realistic,
        )
