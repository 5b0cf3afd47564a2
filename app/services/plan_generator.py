import logging
from datetime import date
from typing import AbstractSet, List, Optional

from app.core.config import settings
from app.models.goal import GoalTypeEnum
from app.schemas.adjustment import ADJUSTMENT_FIELDS, Adjustment, AdjustmentType
from app.schemas.goal import GoalParametersData
from app.schemas.progress import AdherenceMetrics, PlateauResult, TrendResult
from app.services.nutrition_calculator import NutritionCalculator
from app.services.plateau_detector import PlateauDetector

logger = logging.getLogger(__name__)


class PlanGenerator:
    """Ранжированный список корректировок плана.

    Чистая функция от снимка (цель, тренд, плато, приверженность):
    одинаковые входные данные всегда дают одинаковый упорядоченный список.
    Если пользователь идёт по плану и придерживается его, список пуст.
    """

    MIN_TREND_SAMPLES = settings.MIN_TREND_SAMPLES
    ADHERENCE_THRESHOLD = settings.ADHERENCE_THRESHOLD
    WORKOUT_ADHERENCE_FLOOR = settings.WORKOUT_ADHERENCE_FLOOR
    RAPID_CHANGE_MARGIN_KG = settings.RAPID_CHANGE_MARGIN_KG
    MAINTAIN_DRIFT_KG = settings.MAINTAIN_DRIFT_KG
    DELOAD_PLATEAU_DAYS = settings.DELOAD_PLATEAU_DAYS
    DELOAD_DURATION_DAYS = settings.DELOAD_DURATION_DAYS
    MIN_WORKOUT_DAYS = settings.MIN_WORKOUT_DAYS
    LOW_SLEEP_HOURS = settings.LOW_SLEEP_HOURS
    SLEEP_TARGET_HOURS = settings.SLEEP_TARGET_HOURS
    LOW_WELLBEING_RATING = settings.LOW_WELLBEING_RATING

    # Порядок при равном приоритете
    TYPE_ORDER = [
        AdjustmentType.DELOAD,
        AdjustmentType.CALORIE,
        AdjustmentType.WORKOUT_FREQUENCY,
        AdjustmentType.MACRO,
        AdjustmentType.REST,
    ]

    @classmethod
    def _make(
        cls,
        goal: GoalParametersData,
        adjustment_type: AdjustmentType,
        reason: str,
        description: str,
        current_value,
        proposed_new_value,
        priority: int,
    ) -> Adjustment:
        return Adjustment(
            type=adjustment_type,
            reason=reason,
            description=description,
            field=ADJUSTMENT_FIELDS[adjustment_type],
            current_value=current_value,
            proposed_new_value=proposed_new_value,
            priority=max(1, min(5, priority)),
            goal_version=goal.version,
        )

    @classmethod
    def calorie_adjustment(
        cls,
        goal: GoalParametersData,
        trend: TrendResult,
        plateau: PlateauResult,
        adherence: AdherenceMetrics,
    ) -> Optional[Adjustment]:
        band_low, band_high = PlateauDetector.expected_band(goal.goal_type)
        weekly = trend.weekly_slope
        level = plateau.severity_level if plateau.is_plateau else 0
        adherent = adherence.meal_adherence >= cls.ADHERENCE_THRESHOLD

        delta = 0
        reason = ""
        priority = 2
        if goal.goal_type == GoalTypeEnum.reduce_weight:
            if weekly > band_high and adherent:
                delta = -min(300, 150 + 50 * level)
                reason = "weight_loss_plateau" if plateau.is_plateau else "weight_loss_too_slow"
                priority = 2 + level
            elif weekly < band_low - cls.RAPID_CHANGE_MARGIN_KG:
                # Слишком быстрое снижение: риск потери мышечной массы
                delta = max(0, min(150, goal.tdee - goal.target_calories))
                reason = "weight_loss_too_fast"
                priority = 4
        elif goal.goal_type == GoalTypeEnum.build_muscle:
            if weekly < band_low and adherent:
                delta = min(250, 150 + 50 * level)
                reason = "muscle_gain_plateau" if plateau.is_plateau else "muscle_gain_too_slow"
                priority = 2 + level
            elif weekly > band_high + cls.RAPID_CHANGE_MARGIN_KG:
                delta = -150
                reason = "weight_gain_too_fast"
        elif goal.goal_type == GoalTypeEnum.maintain:
            if abs(weekly) > cls.MAINTAIN_DRIFT_KG and adherent:
                delta = -100 if weekly > 0 else 100
                reason = "weight_drift"

        if delta == 0:
            return None

        new_calories = NutritionCalculator.clamp_calories(goal.target_calories + delta)
        change = new_calories - goal.target_calories
        # Снижение не может превратиться в повышение (и наоборот) из-за границ диапазона
        if change == 0 or (change > 0) != (delta > 0):
            logger.info(
                f"Корректировка калорий {goal.target_calories} → {goal.target_calories + delta} "
                f"упирается в границы {NutritionCalculator.CALORIE_SAFETY_FLOOR}-"
                f"{NutritionCalculator.CALORIE_CEILING} ккал, пропускаем"
            )
            return None

        verb = "Увеличить" if change > 0 else "Уменьшить"
        return cls._make(
            goal,
            AdjustmentType.CALORIE,
            reason,
            f"{verb} дневную норму на {abs(change)} ккал: {goal.target_calories} → {new_calories}",
            goal.target_calories,
            new_calories,
            priority,
        )

    @classmethod
    def deload_adjustment(
        cls,
        goal: GoalParametersData,
        plateau: PlateauResult,
        adherence: AdherenceMetrics,
        today: date,
    ) -> Optional[Adjustment]:
        if goal.workout_days_per_week == 0:
            return None
        if goal.deload_until and goal.deload_until >= today:
            return None

        if plateau.is_plateau and plateau.duration_days >= cls.DELOAD_PLATEAU_DAYS:
            return cls._make(
                goal,
                AdjustmentType.DELOAD,
                "prolonged_plateau",
                f"Плато уже {plateau.duration_days} дн. — разгрузочная неделя: "
                f"объём тренировок вдвое меньше на {cls.DELOAD_DURATION_DAYS} дн.",
                None,
                cls.DELOAD_DURATION_DAYS,
                3 + plateau.severity_level,
            )

        low_energy = 0 < adherence.average_energy < cls.LOW_WELLBEING_RATING
        low_mood = 0 < adherence.average_mood < cls.LOW_WELLBEING_RATING
        if low_energy or low_mood:
            return cls._make(
                goal,
                AdjustmentType.DELOAD,
                "low_energy",
                "Низкие энергия и настроение — снизить интенсивность тренировок, чтобы избежать выгорания",
                None,
                cls.DELOAD_DURATION_DAYS,
                4,
            )
        return None

    @classmethod
    def workout_frequency_adjustment(
        cls,
        goal: GoalParametersData,
        adherence: AdherenceMetrics,
    ) -> Optional[Adjustment]:
        if adherence.workouts_planned == 0:
            return None
        if adherence.workout_adherence >= cls.WORKOUT_ADHERENCE_FLOOR:
            return None
        # Меняем то, что пользователь реально не выполняет, а не калории
        if adherence.meal_adherence < cls.ADHERENCE_THRESHOLD:
            return None

        new_days = max(goal.workout_days_per_week - 1, cls.MIN_WORKOUT_DAYS)
        if new_days >= goal.workout_days_per_week:
            return None

        return cls._make(
            goal,
            AdjustmentType.WORKOUT_FREQUENCY,
            "low_workout_adherence",
            f"Выполнено {adherence.workout_adherence:.0f}% тренировок — сократить до {new_days} в неделю",
            goal.workout_days_per_week,
            new_days,
            4,
        )

    @classmethod
    def macro_adjustment(
        cls,
        goal: GoalParametersData,
        plateau: PlateauResult,
    ) -> Optional[Adjustment]:
        if not plateau.is_plateau:
            return None
        if goal.goal_type not in (GoalTypeEnum.reduce_weight, GoalTypeEnum.build_muscle):
            return None
        if goal.macro_profile == "high_protein":
            return None

        return cls._make(
            goal,
            AdjustmentType.MACRO,
            "plateau_macro_shift",
            "Сместить БЖУ в сторону белка (40/30/30), чтобы сдвинуть плато",
            goal.macro_profile,
            "high_protein",
            3,
        )

    @classmethod
    def rest_adjustment(
        cls,
        goal: GoalParametersData,
        adherence: AdherenceMetrics,
    ) -> Optional[Adjustment]:
        if not 0 < adherence.average_sleep_hours < cls.LOW_SLEEP_HOURS:
            return None
        if goal.sleep_target_hours >= cls.SLEEP_TARGET_HOURS:
            return None

        return cls._make(
            goal,
            AdjustmentType.REST,
            "insufficient_sleep",
            f"В среднем {adherence.average_sleep_hours:.1f} ч сна — цель {cls.SLEEP_TARGET_HOURS:g} ч для восстановления",
            goal.sleep_target_hours,
            cls.SLEEP_TARGET_HOURS,
            4,
        )

    @classmethod
    def generate(
        cls,
        goal: GoalParametersData,
        trend: TrendResult,
        plateau: PlateauResult,
        adherence: AdherenceMetrics,
        today: date,
        suppressed_types: AbstractSet[AdjustmentType] = frozenset(),
    ) -> List[Adjustment]:
        if trend.sample_count < cls.MIN_TREND_SAMPLES:
            return []

        candidates = [
            cls.deload_adjustment(goal, plateau, adherence, today),
            cls.calorie_adjustment(goal, trend, plateau, adherence),
            cls.workout_frequency_adjustment(goal, adherence),
            cls.macro_adjustment(goal, plateau),
            cls.rest_adjustment(goal, adherence),
        ]
        adjustments = [
            a for a in candidates
            if a is not None and a.type not in suppressed_types
        ]
        return sorted(adjustments, key=lambda a: (-a.priority, cls.TYPE_ORDER.index(a.type)))
