import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from app.core.config import settings
from app.models.goal import GoalTypeEnum
from app.schemas.adjustment import Adjustment, AdjustmentType
from app.schemas.goal import GoalParametersData
from app.schemas.progress import (
    AdherenceMetrics, InsightCategory, InsightType, ProgressInsight,
    ProgressOverview, ProgressSampleData, TrendDirection, TrendResult, WeeklyReport
)
from app.services.trend_estimator import TrendEstimator

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Сводка, инсайты и недельный отчёт для дашборда.

    Только форматирует уже посчитанные метрики, на план не влияет.
    """

    DIRECTION_THRESHOLD_KG = 0.1
    SLEEP_REFERENCE_HOURS = 8.0
    WATER_REFERENCE_ML = 2000.0
    LOW_WATER_ML = 1500.0
    POOR_SLEEP_HOURS = 6.0
    GOOD_SLEEP_HOURS = 7.0
    LOW_WELLBEING_RATING = settings.LOW_WELLBEING_RATING
    STREAK_INSIGHT_DAYS = 7
    WEEK_DAYS = 7
    WEEKLY_WEIGHT_CHANGE_KG = 0.3

    NEXT_WEEK_GOALS = [
        "Держать стабильный график тренировок",
        "Записывать питание каждый день",
        "Спать 7-9 часов каждую ночь",
    ]

    # ---------------------------------------------------------------------
    # Сводные показатели
    # ---------------------------------------------------------------------

    @classmethod
    def direction(cls, weekly_slope: float) -> TrendDirection:
        if weekly_slope > cls.DIRECTION_THRESHOLD_KG:
            return TrendDirection.GAINING
        if weekly_slope < -cls.DIRECTION_THRESHOLD_KG:
            return TrendDirection.LOSING
        return TrendDirection.MAINTAINING

    @classmethod
    def overall_score(cls, adherence: AdherenceMetrics) -> float:
        """Общая оценка 0-100: тренировки 40%, сон, вода и настроение по 20%."""
        if adherence.days_tracked == 0:
            return 0.0
        sleep_score = min(adherence.average_sleep_hours / cls.SLEEP_REFERENCE_HOURS * 100, 100)
        water_score = min(adherence.average_water_ml / cls.WATER_REFERENCE_ML * 100, 100)
        mood_score = adherence.average_mood / 5 * 100
        score = (
            adherence.workout_adherence * 0.4
            + sleep_score * 0.2
            + water_score * 0.2
            + mood_score * 0.2
        )
        return round(min(score, 100.0), 1)

    @staticmethod
    def consistency_score(samples: Sequence[ProgressSampleData]) -> float:
        """Доля дней, в которых записано хоть что-то: вес, тренировка или вода."""
        if not samples:
            return 0.0
        filled = [
            s for s in samples
            if s.weight is not None or s.workouts_completed > 0 or s.water_ml > 0
        ]
        return round(len(filled) / len(samples) * 100, 1)

    @classmethod
    def calculate_overview(
        cls,
        samples: Sequence[ProgressSampleData],
        trend: TrendResult,
        adherence: AdherenceMetrics,
    ) -> ProgressOverview:
        weighted = TrendEstimator.weighted_points(samples)
        change_kg = 0.0
        change_percentage = 0.0
        if len(weighted) >= 2:
            start_weight = weighted[0].weight
            change_kg = weighted[-1].weight - start_weight
            change_percentage = change_kg / start_weight * 100

        return ProgressOverview(
            weight_change_kg=round(change_kg, 2),
            weight_change_percentage=round(change_percentage, 2),
            direction=cls.direction(trend.weekly_slope),
            overall_score=cls.overall_score(adherence),
            consistency_score=cls.consistency_score(samples),
        )

    # ---------------------------------------------------------------------
    # Инсайты
    # ---------------------------------------------------------------------

    @staticmethod
    def weight_insights(goal: GoalParametersData, change_kg: float) -> List[ProgressInsight]:
        insights = []
        if goal.goal_type == GoalTypeEnum.reduce_weight:
            if change_kg < 0:
                insights.append(ProgressInsight(
                    type=InsightType.SUCCESS,
                    category=InsightCategory.WEIGHT,
                    title="Вес снижается",
                    message=f"Минус {abs(change_kg):.1f} кг за период. Так держать!",
                    priority=5,
                ))
            elif change_kg > 0:
                insights.append(ProgressInsight(
                    type=InsightType.WARNING,
                    category=InsightCategory.WEIGHT,
                    title="Вес растёт",
                    message=f"Плюс {change_kg:.1f} кг за период при цели похудеть",
                    recommendation="Проверьте дефицит калорий и точность записей о питании",
                    priority=4,
                ))
        elif goal.goal_type == GoalTypeEnum.build_muscle:
            if 0 < change_kg < 0.5:
                insights.append(ProgressInsight(
                    type=InsightType.SUCCESS,
                    category=InsightCategory.WEIGHT,
                    title="Чистый набор",
                    message=f"Плюс {change_kg:.1f} кг: темп подходит для набора мышц без лишнего жира",
                    priority=5,
                ))
            elif change_kg > 1:
                insights.append(ProgressInsight(
                    type=InsightType.WARNING,
                    category=InsightCategory.WEIGHT,
                    title="Слишком быстрый набор",
                    message=f"Плюс {change_kg:.1f} кг за период, часть может быть жиром",
                    recommendation="Немного уменьшите профицит калорий",
                    priority=4,
                ))
        return insights

    @classmethod
    def habit_insights(cls, adherence: AdherenceMetrics) -> List[ProgressInsight]:
        insights = []

        if adherence.workouts_planned > 0:
            if adherence.workout_adherence >= 90:
                insights.append(ProgressInsight(
                    type=InsightType.SUCCESS,
                    category=InsightCategory.WORKOUT,
                    title="Отличная регулярность",
                    message=f"Выполнено {adherence.workout_adherence:.0f}% запланированных тренировок",
                    priority=4,
                ))
            elif adherence.workout_adherence < 50:
                insights.append(ProgressInsight(
                    type=InsightType.WARNING,
                    category=InsightCategory.WORKOUT,
                    title="Тренировки пропускаются",
                    message=f"Выполнено только {adherence.workout_adherence:.0f}% тренировок",
                    recommendation="Сократите число тренировочных дней до реально выполнимого",
                    priority=5,
                ))

        if adherence.current_streak >= cls.STREAK_INSIGHT_DAYS:
            insights.append(ProgressInsight(
                type=InsightType.SUCCESS,
                category=InsightCategory.WORKOUT,
                title="Серия тренировок",
                message=f"{adherence.current_streak} дн. подряд с тренировкой",
                priority=3,
            ))

        sleep = adherence.average_sleep_hours
        if 0 < sleep < cls.POOR_SLEEP_HOURS:
            insights.append(ProgressInsight(
                type=InsightType.WARNING,
                category=InsightCategory.LIFESTYLE,
                title="Недосып",
                message=f"В среднем {sleep:.1f} ч сна, восстановление страдает",
                recommendation="Старайтесь спать 7-9 часов",
                priority=4,
            ))
        elif sleep >= cls.GOOD_SLEEP_HOURS:
            insights.append(ProgressInsight(
                type=InsightType.SUCCESS,
                category=InsightCategory.LIFESTYLE,
                title="Хороший сон",
                message=f"В среднем {sleep:.1f} ч сна",
                priority=2,
            ))

        if 0 < adherence.average_water_ml < cls.LOW_WATER_ML:
            insights.append(ProgressInsight(
                type=InsightType.WARNING,
                category=InsightCategory.NUTRITION,
                title="Мало воды",
                message=f"В среднем {adherence.average_water_ml:.0f} мл воды в день",
                recommendation="Пейте не меньше 2000 мл в день",
                priority=3,
            ))

        low_mood = 0 < adherence.average_mood < cls.LOW_WELLBEING_RATING
        low_energy = 0 < adherence.average_energy < cls.LOW_WELLBEING_RATING
        if low_mood or low_energy:
            insights.append(ProgressInsight(
                type=InsightType.INFO,
                category=InsightCategory.LIFESTYLE,
                title="Низкие энергия и настроение",
                message="Самочувствие ниже обычного, организм может быть перегружен",
                recommendation="Рассмотрите разгрузочную неделю и проверьте, хватает ли калорий",
                priority=4,
            ))
        return insights

    @staticmethod
    def trend_insight(trend: TrendResult) -> Optional[ProgressInsight]:
        if trend.sample_count < 2:
            return None
        weekly = trend.weekly_slope
        if weekly < 0:
            message = f"Вы теряете в среднем {abs(weekly):.2f} кг в неделю"
        elif weekly > 0:
            message = f"Вы набираете в среднем {weekly:.2f} кг в неделю"
        else:
            message = "Вес стабилен"
        return ProgressInsight(
            type=InsightType.INFO,
            category=InsightCategory.WEIGHT,
            title="Тренд веса",
            message=message,
            priority=2,
        )

    @staticmethod
    def workout_consistency_insight(samples: Sequence[ProgressSampleData]) -> Optional[ProgressInsight]:
        if not samples:
            return None
        workout_days = len([s for s in samples if s.workouts_completed > 0])
        rate = round(workout_days / len(samples) * 100)
        if rate >= 80:
            return ProgressInsight(
                type=InsightType.SUCCESS,
                category=InsightCategory.WORKOUT,
                title="Тренировочная дисциплина",
                message=f"Отличная регулярность: тренировки в {rate}% дней",
                priority=2,
            )
        if rate >= 60:
            return ProgressInsight(
                type=InsightType.INFO,
                category=InsightCategory.WORKOUT,
                title="Тренировочная дисциплина",
                message=f"Хорошая регулярность: {rate}%. Стремитесь к 80% и выше",
                priority=2,
            )
        return ProgressInsight(
            type=InsightType.ACTION,
            category=InsightCategory.WORKOUT,
            title="Тренировочная дисциплина",
            message=f"Тренировки только в {rate}% дней. Регулярность заметно ускорит результат",
            priority=3,
        )

    @staticmethod
    def calorie_insight(adherence: AdherenceMetrics) -> Optional[ProgressInsight]:
        if adherence.average_calories <= 0:
            return None
        return ProgressInsight(
            type=InsightType.INFO,
            category=InsightCategory.NUTRITION,
            title="Калорийность",
            message=f"В среднем {round(adherence.average_calories)} ккал в день",
            priority=1,
        )

    @classmethod
    def generate_insights(
        cls,
        goal: Optional[GoalParametersData],
        samples: Sequence[ProgressSampleData],
        overview: ProgressOverview,
        trend: TrendResult,
        adherence: AdherenceMetrics,
    ) -> List[ProgressInsight]:
        """Инсайты по убыванию приоритета; при равном приоритете порядок правил."""
        insights = []
        if goal is not None and trend.sample_count >= 2:
            insights.extend(cls.weight_insights(goal, overview.weight_change_kg))
        insights.extend(cls.habit_insights(adherence))

        optional = [
            cls.trend_insight(trend),
            cls.workout_consistency_insight(samples),
            cls.calorie_insight(adherence),
        ]
        insights.extend(i for i in optional if i is not None)
        return sorted(insights, key=lambda i: -i.priority)

    # ---------------------------------------------------------------------
    # Текстовые сводки
    # ---------------------------------------------------------------------

    @staticmethod
    def generate_summary(adjustments: Sequence[Adjustment]) -> str:
        if not adjustments:
            return "План работает! Продолжайте в том же духе, корректировки сейчас не нужны."

        by_type = {}
        for adjustment in adjustments:
            by_type.setdefault(adjustment.type, adjustment)

        parts = []
        calorie = by_type.get(AdjustmentType.CALORIE)
        if calorie is not None:
            change = int(calorie.proposed_new_value) - int(calorie.current_value)
            parts.append(f"изменить калорийность на {change:+d} ккал")
        if AdjustmentType.WORKOUT_FREQUENCY in by_type:
            parts.append("изменить частоту тренировок")
        if AdjustmentType.DELOAD in by_type:
            parts.append("провести разгрузочную неделю")
        if AdjustmentType.REST in by_type:
            parts.append("уделить внимание восстановлению")
        if AdjustmentType.MACRO in by_type:
            parts.append("сместить БЖУ в сторону белка")

        return (
            f"По итогам прогресса рекомендуем: {', '.join(parts)}. "
            f"Эти изменения помогут удержать курс к цели."
        )

    @classmethod
    def generate_weekly_report(
        cls,
        samples: Sequence[ProgressSampleData],
        today: date,
    ) -> Optional[WeeklyReport]:
        week_start = today - timedelta(days=cls.WEEK_DAYS)
        week = sorted(
            (s for s in samples if week_start < s.date <= today),
            key=lambda s: s.date,
        )
        if not week:
            logger.debug("Нет записей за последние 7 дней, недельный отчёт не строится")
            return None

        workout_days = len([s for s in week if s.workouts_completed > 0])
        logged_calories = [s.calories_consumed for s in week if s.calories_consumed > 0]
        average_calories = round(sum(logged_calories) / len(logged_calories)) if logged_calories else 0

        achievements = []
        areas_to_improve = []
        if workout_days >= 4:
            achievements.append(f"За неделю выполнено {workout_days} тренировок!")
        elif workout_days >= 2:
            achievements.append(f"Выполнено тренировок: {workout_days}.")
        else:
            areas_to_improve.append("Увеличить число тренировок хотя бы до 3 в неделю")

        weighted = [s for s in week if s.weight is not None]
        if len(weighted) >= 2:
            change = round(weighted[-1].weight - weighted[0].weight, 2)
            if abs(change) >= cls.WEEKLY_WEIGHT_CHANGE_KG:
                achievements.append(f"Вес изменился на {change:+.1f} кг.")

        return WeeklyReport(
            summary=(
                f"За неделю выполнено тренировок: {workout_days}, "
                f"в среднем {average_calories} ккал в день."
            ),
            achievements=achievements,
            areas_to_improve=areas_to_improve,
            next_week_goals=list(cls.NEXT_WEEK_GOALS),
        )
