import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import (
    AdjustmentCooldownError,
    AdjustmentValidationError,
    ConcurrencyConflictError,
    GoalNotFoundError,
)
from app.schemas.adjustment import ADJUSTMENT_FIELDS, Adjustment, AdjustmentType
from app.schemas.goal import GoalParametersData
from app.services.nutrition_calculator import NutritionCalculator

logger = logging.getLogger(__name__)


class AdjustmentApplier:
    """Проверяет и сохраняет принятую корректировку.

    Всё или ничего: параметры цели и запись в истории фиксируются одним
    commit, при любой ошибке выполняется rollback. Гонки двух одновременных принятий
    разрешает compare-and-swap по GoalParameters.version.
    """

    CALORIE_SAFETY_FLOOR = settings.CALORIE_SAFETY_FLOOR
    CALORIE_CEILING = settings.CALORIE_CEILING
    ADJUSTMENT_COOLDOWN_DAYS = settings.ADJUSTMENT_COOLDOWN_DAYS
    DELOAD_MAX_DAYS = settings.DELOAD_MAX_DAYS
    MAX_SLEEP_TARGET_HOURS = 12.0

    def __init__(self, repository):
        self.repository = repository

    @classmethod
    def validate(cls, adjustment: Adjustment) -> Any:
        """Возвращает проверенное значение, приведённое к типу поля."""
        value = adjustment.proposed_new_value

        if adjustment.type in (
            AdjustmentType.CALORIE,
            AdjustmentType.WORKOUT_FREQUENCY,
            AdjustmentType.DELOAD,
        ):
            if isinstance(value, bool) or not isinstance(value, int):
                raise AdjustmentValidationError(
                    f"Для корректировки {adjustment.type.value} нужно целое число, получено {value!r}"
                )

        if adjustment.type == AdjustmentType.CALORIE:
            if not cls.CALORIE_SAFETY_FLOOR <= value <= cls.CALORIE_CEILING:
                raise AdjustmentValidationError(
                    f"Калорийность {value} вне допустимого диапазона "
                    f"{cls.CALORIE_SAFETY_FLOOR}-{cls.CALORIE_CEILING} ккал"
                )
            return value

        if adjustment.type == AdjustmentType.WORKOUT_FREQUENCY:
            if not 0 <= value <= 7:
                raise AdjustmentValidationError(f"Тренировок в неделю должно быть 0-7, получено {value}")
            return value

        if adjustment.type == AdjustmentType.DELOAD:
            if not 1 <= value <= cls.DELOAD_MAX_DAYS:
                raise AdjustmentValidationError(
                    f"Разгрузка должна длиться 1-{cls.DELOAD_MAX_DAYS} дн., получено {value}"
                )
            return value

        if adjustment.type == AdjustmentType.MACRO:
            if value not in NutritionCalculator.MACRO_RATIOS:
                raise AdjustmentValidationError(f"Неизвестный профиль БЖУ: {value!r}")
            return value

        if adjustment.type == AdjustmentType.REST:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise AdjustmentValidationError(f"Цель по сну должна быть числом, получено {value!r}")
            if not 0 < value <= cls.MAX_SLEEP_TARGET_HOURS:
                raise AdjustmentValidationError(
                    f"Цель по сну должна быть в диапазоне (0, {cls.MAX_SLEEP_TARGET_HOURS:g}] ч"
                )
            return float(value)

        raise AdjustmentValidationError(f"Неизвестный тип корректировки: {adjustment.type}")

    @staticmethod
    def build_update(adjustment: Adjustment, value: Any, today: date) -> Dict[str, Any]:
        field = ADJUSTMENT_FIELDS[adjustment.type]
        if adjustment.type == AdjustmentType.DELOAD:
            return {field: today + timedelta(days=value)}
        return {field: value}

    async def check_cooldown(self, user_id: int, adjustment: Adjustment, now: datetime) -> None:
        since = now - timedelta(days=self.ADJUSTMENT_COOLDOWN_DAYS)
        history = await self.repository.fetch_adjustment_history(user_id, since)
        for entry in history:
            if entry.adjustment_type == adjustment.type:
                raise AdjustmentCooldownError(
                    f"Корректировка {adjustment.type.value} уже принималась "
                    f"{entry.accepted_at:%d.%m.%Y}, повторить можно через "
                    f"{self.ADJUSTMENT_COOLDOWN_DAYS} дн."
                )

    async def apply(
        self,
        user_id: int,
        adjustment: Adjustment,
        now: Optional[datetime] = None,
    ) -> GoalParametersData:
        now = now or datetime.utcnow()
        value = self.validate(adjustment)
        await self.check_cooldown(user_id, adjustment, now)

        goal = await self.repository.fetch_goal(user_id)
        if goal is None:
            raise GoalNotFoundError(f"У пользователя {user_id} нет активной цели")
        if goal.version != adjustment.goal_version:
            raise ConcurrencyConflictError(
                f"Цель изменилась (версия {goal.version}, ожидалась {adjustment.goal_version})"
            )

        partial_update = self.build_update(adjustment, value, now.date())
        try:
            persisted = await self.repository.persist_goal(
                user_id, partial_update, expected_version=goal.version
            )
            if not persisted:
                raise ConcurrencyConflictError(
                    f"Цель пользователя {user_id} изменена параллельным запросом"
                )
            await self.repository.append_adjustment_history(user_id, adjustment, now)
            await self.repository.commit()
        except Exception:
            await self.repository.rollback()
            raise

        logger.info(
            f"Пользователь {user_id}: принята корректировка {adjustment.type.value} "
            f"({adjustment.reason}) → {partial_update}"
        )
        return goal.model_copy(update={
            **partial_update,
            "version": goal.version + 1,
            "updated_at": now,
        })
