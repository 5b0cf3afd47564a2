import logging
from datetime import date, datetime, timedelta
from typing import Optional

from app.core.config import settings
from app.schemas.adjustment import Adjustment
from app.schemas.goal import GoalParametersData
from app.schemas.progress import (
    AdherenceMetrics, AnalysisResult, MacroPlan, OutcomePrediction,
    PlateauResult, TrendResult
)
from app.services.adherence_calculator import AdherenceCalculator
from app.services.adjustment_applier import AdjustmentApplier
from app.services.nutrition_calculator import NutritionCalculator
from app.services.outcome_predictor import OutcomePredictor
from app.services.plan_generator import PlanGenerator
from app.services.plateau_detector import PlateauDetector
from app.services.progress_reporter import ProgressReporter
from app.services.trend_estimator import TrendEstimator

logger = logging.getLogger(__name__)


class ProgressEngine:
    """Точка входа: анализ прогресса и принятие корректировок.

    Состояния между запросами нет: каждый вызов читает свежий снимок
    из репозитория.
    """

    LOOKBACK_DAYS = settings.LOOKBACK_DAYS
    ADJUSTMENT_COOLDOWN_DAYS = settings.ADJUSTMENT_COOLDOWN_DAYS

    def __init__(self, repository):
        self.repository = repository
        self.applier = AdjustmentApplier(repository)

    @staticmethod
    def empty_result(days_tracked: int = 0) -> AnalysisResult:
        return AnalysisResult(
            trend=TrendResult(),
            plateau=PlateauResult(),
            prediction=OutcomePrediction(),
            adjustments=[],
            adherence=AdherenceMetrics(days_tracked=days_tracked),
            days_tracked=days_tracked,
        )

    @staticmethod
    def build_macro_plan(goal: GoalParametersData) -> MacroPlan:
        macros = NutritionCalculator.calculate_macros(goal.target_calories, goal.macro_profile)
        return MacroPlan(
            calories=goal.target_calories,
            profile=goal.macro_profile,
            protein=macros["protein"],
            carbs=macros["carbs"],
            fat=macros["fat"],
        )

    @staticmethod
    def analyze_snapshot(
        samples,
        goal: Optional[GoalParametersData],
        today: date,
        suppressed_types=frozenset(),
    ) -> AnalysisResult:
        """Чистый анализ по готовому снимку данных."""
        trend = TrendEstimator.estimate(samples)
        adherence = AdherenceCalculator.calculate(samples, goal)

        weighted = TrendEstimator.weighted_points(samples)
        current_weight = weighted[-1].weight if weighted else None

        overview = ProgressReporter.calculate_overview(samples, trend, adherence)
        insights = ProgressReporter.generate_insights(goal, samples, overview, trend, adherence)
        weekly_report = ProgressReporter.generate_weekly_report(samples, today)

        if goal is None:
            prediction = OutcomePredictor.predict(current_weight, trend, today)
            return AnalysisResult(
                trend=trend,
                plateau=PlateauResult(),
                prediction=prediction,
                adjustments=[],
                adherence=adherence,
                days_tracked=adherence.days_tracked,
                milestones=prediction.milestones,
                overview=overview,
                insights=insights,
                weekly_report=weekly_report,
            )

        plateau = PlateauDetector.detect(trend, goal.goal_type, adherence.logging_consistency)
        prediction = OutcomePredictor.predict(
            current_weight,
            trend,
            today,
            target_date=goal.target_date,
            target_weight=goal.target_weight,
        )
        adjustments = PlanGenerator.generate(
            goal, trend, plateau, adherence, today, suppressed_types=suppressed_types
        )

        return AnalysisResult(
            trend=trend,
            plateau=plateau,
            prediction=prediction,
            adjustments=adjustments,
            adherence=adherence,
            days_tracked=adherence.days_tracked,
            milestones=prediction.milestones,
            macros=ProgressEngine.build_macro_plan(goal),
            overview=overview,
            insights=insights,
            summary=ProgressReporter.generate_summary(adjustments),
            weekly_report=weekly_report,
        )

    async def analyze(self, user_id: int, today: Optional[date] = None) -> AnalysisResult:
        today = today or date.today()
        since = today - timedelta(days=self.LOOKBACK_DAYS)

        samples = await self.repository.fetch_samples(user_id, since)
        goal = await self.repository.fetch_goal(user_id)
        history = await self.repository.fetch_adjustment_history(
            user_id,
            datetime.combine(today, datetime.min.time()) - timedelta(days=self.ADJUSTMENT_COOLDOWN_DAYS),
        )
        suppressed_types = frozenset(entry.adjustment_type for entry in history)

        try:
            return self.analyze_snapshot(samples, goal, today, suppressed_types)
        except Exception as e:
            # Ошибка анализа не должна ронять дашборд: отдаём консервативный ответ
            logger.error(f"Ошибка анализа прогресса пользователя {user_id}: {e}")
            return self.empty_result(days_tracked=len(samples))

    async def accept_adjustment(
        self,
        user_id: int,
        adjustment: Adjustment,
        now: Optional[datetime] = None,
    ) -> GoalParametersData:
        return await self.applier.apply(user_id, adjustment, now=now)
