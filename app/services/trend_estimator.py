import logging
import math
from typing import List, Sequence, Tuple

from app.core.config import settings
from app.core.exceptions import InsufficientDataError
from app.schemas.progress import ProgressSampleData, TrendResult

logger = logging.getLogger(__name__)


class TrendEstimator:
    """Линейный тренд веса и оценка доверия к нему (0-100)."""

    MIN_TREND_SAMPLES = settings.MIN_TREND_SAMPLES
    LOW_CONFIDENCE_CAP = settings.LOW_CONFIDENCE_CAP
    FULL_CONFIDENCE_SAMPLES = settings.FULL_CONFIDENCE_SAMPLES

    @staticmethod
    def linear_regression(values: Sequence[float]) -> float:
        """Наклон МНК по индексу точки (а не по дате, пропуски дней не мешают)."""
        n = len(values)
        if n < 2:
            raise InsufficientDataError(f"Для тренда нужно минимум 2 точки, получено {n}")

        sum_x = sum_y = sum_xy = sum_x2 = 0.0
        for x, y in enumerate(values):
            sum_x += x
            sum_y += y
            sum_xy += x * y
            sum_x2 += x * x

        denominator = n * sum_x2 - sum_x * sum_x
        slope = (n * sum_xy - sum_x * sum_y) / denominator
        # Гасим шум float для одинаковых значений
        return 0.0 if math.isclose(slope, 0.0, abs_tol=1e-9) else slope

    @staticmethod
    def std_dev(values: Sequence[float]) -> float:
        if not values:
            return 0.0
        mean = sum(values) / len(values)
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        return math.sqrt(variance)

    @classmethod
    def weighted_points(cls, samples: Sequence[ProgressSampleData]) -> List[ProgressSampleData]:
        ordered = sorted(samples, key=lambda s: s.date)
        return [s for s in ordered if s.weight is not None]

    @classmethod
    def calculate_confidence(
        cls,
        weights: Sequence[float],
        samples: Sequence[ProgressSampleData],
    ) -> Tuple[int, float, float, float]:
        """Возвращает (confidence, variance_score, volume_score, consistency_score)."""
        n = len(weights)
        if n == 0:
            return 0, 0.0, 0.0, 0.0

        variance_score = max(0.0, 100 - cls.std_dev(weights) * 10)
        volume_score = min(100.0, n / cls.FULL_CONFIDENCE_SAMPLES * 100)

        completed_days = len([s for s in samples if s.workouts_completed > 0])
        consistency_score = completed_days / len(samples) * 100 if samples else 0.0

        confidence = round((variance_score + volume_score + consistency_score) / 3)
        if n < cls.MIN_TREND_SAMPLES:
            # Две точки не дают права на уверенный прогноз
            confidence = min(cls.LOW_CONFIDENCE_CAP, confidence)

        return (
            int(confidence),
            round(variance_score, 2),
            round(volume_score, 2),
            round(consistency_score, 2),
        )

    @classmethod
    def estimate(cls, samples: Sequence[ProgressSampleData]) -> TrendResult:
        points = cls.weighted_points(samples)
        weights = [p.weight for p in points]
        confidence, variance_score, volume_score, consistency_score = cls.calculate_confidence(
            weights, samples
        )

        try:
            slope = cls.linear_regression(weights)
        except InsufficientDataError as e:
            logger.info(f"Тренд не построен: {e}")
            return TrendResult(
                slope=0.0,
                weekly_slope=0.0,
                confidence=confidence,
                sample_count=len(points),
                span_days=0,
                variance_score=variance_score,
                volume_score=volume_score,
                consistency_score=consistency_score,
                insufficient_data=True,
            )

        span_days = (points[-1].date - points[0].date).days
        if span_days > 0:
            mean_interval_days = span_days / (len(points) - 1)
            weekly_slope = slope * 7 / mean_interval_days
        else:
            weekly_slope = slope

        return TrendResult(
            slope=slope,
            weekly_slope=weekly_slope,
            confidence=confidence,
            sample_count=len(points),
            span_days=span_days,
            variance_score=variance_score,
            volume_score=volume_score,
            consistency_score=consistency_score,
            insufficient_data=len(points) < cls.MIN_TREND_SAMPLES,
        )
