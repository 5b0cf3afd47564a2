import math
from typing import Callable, Optional, Sequence

from app.core.config import settings
from app.schemas.goal import GoalParametersData
from app.schemas.progress import AdherenceMetrics, ProgressSampleData


class AdherenceCalculator:
    CALORIE_ADHERENCE_TOLERANCE = settings.CALORIE_ADHERENCE_TOLERANCE

    @staticmethod
    def _average(
        samples: Sequence[ProgressSampleData],
        getter: Callable[[ProgressSampleData], Optional[float]],
    ) -> float:
        """Среднее только по дням, где значение заполнено."""
        values = [getter(s) for s in samples]
        values = [v for v in values if v]
        return round(sum(values) / len(values), 2) if values else 0.0

    @staticmethod
    def calculate_streaks(samples: Sequence[ProgressSampleData]) -> tuple:
        longest = 0
        current = 0
        for sample in samples:
            if sample.workouts_completed > 0:
                current += 1
                longest = max(longest, current)
            else:
                current = 0
        return current, longest

    @classmethod
    def is_on_calorie_target(cls, sample: ProgressSampleData, target_calories: int) -> bool:
        if sample.calories_consumed <= 0 or target_calories <= 0:
            return False
        deviation = abs(sample.calories_consumed - target_calories) / target_calories
        return deviation <= cls.CALORIE_ADHERENCE_TOLERANCE

    @classmethod
    def calculate(
        cls,
        samples: Sequence[ProgressSampleData],
        goal: Optional[GoalParametersData],
    ) -> AdherenceMetrics:
        if not samples:
            return AdherenceMetrics()

        ordered = sorted(samples, key=lambda s: s.date)
        days_tracked = len(ordered)
        window_days = (ordered[-1].date - ordered[0].date).days + 1

        workouts_completed = sum(s.workouts_completed for s in ordered)
        workout_days = goal.workout_days_per_week if goal else 0
        workouts_planned = math.ceil(window_days / 7) * workout_days
        if workouts_planned > 0:
            workout_adherence = min(100.0, workouts_completed / workouts_planned * 100)
        else:
            workout_adherence = 100.0

        if goal:
            on_target = len([s for s in ordered if cls.is_on_calorie_target(s, goal.target_calories)])
            meal_adherence = on_target / days_tracked * 100
        else:
            meal_adherence = 0.0

        current_streak, longest_streak = cls.calculate_streaks(ordered)

        return AdherenceMetrics(
            days_tracked=days_tracked,
            window_days=window_days,
            logging_consistency=round(min(100.0, days_tracked / window_days * 100), 1),
            workout_adherence=round(workout_adherence, 1),
            meal_adherence=round(meal_adherence, 1),
            workouts_completed=workouts_completed,
            workouts_planned=workouts_planned,
            current_streak=current_streak,
            longest_streak=longest_streak,
            average_sleep_hours=cls._average(ordered, lambda s: s.sleep_hours),
            average_water_ml=cls._average(ordered, lambda s: s.water_ml),
            average_mood=cls._average(ordered, lambda s: s.mood),
            average_energy=cls._average(ordered, lambda s: s.energy),
            average_calories=cls._average(ordered, lambda s: s.calories_consumed),
        )
