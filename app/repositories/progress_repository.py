from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_

from app.models.adjustment import AdjustmentHistory
from app.models.goal import GoalParameters
from app.models.progress import ProgressSample
from app.schemas.adjustment import Adjustment, AdjustmentHistoryEntry
from app.schemas.goal import GoalParametersData
from app.schemas.progress import ProgressSampleData


class ProgressRepository:
    """Хранилище дневных записей и параметров цели.

    Методы записи не делают commit: транзакцией управляет вызывающий код
    через commit()/rollback(), чтобы изменение цели и запись в историю
    применялись вместе.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_samples(self, user_id: int, since_date: date) -> List[ProgressSampleData]:
        result = await self.db.execute(
            select(ProgressSample)
            .where(and_(
                ProgressSample.user_id == user_id,
                ProgressSample.date >= since_date
            ))
            .order_by(ProgressSample.date.asc())
        )
        return [ProgressSampleData.model_validate(row) for row in result.scalars().all()]

    async def fetch_goal(self, user_id: int) -> Optional[GoalParametersData]:
        result = await self.db.execute(
            select(GoalParameters).where(GoalParameters.user_id == user_id)
        )
        goal = result.scalar_one_or_none()
        if goal is None:
            return None
        return GoalParametersData.model_validate(goal)

    async def persist_goal(
        self,
        user_id: int,
        partial_update: Dict[str, Any],
        expected_version: int,
    ) -> bool:
        """Compare-and-swap по полю version. False, если версия уже изменилась."""
        result = await self.db.execute(
            update(GoalParameters)
            .where(and_(
                GoalParameters.user_id == user_id,
                GoalParameters.version == expected_version
            ))
            .values(
                **partial_update,
                version=expected_version + 1,
                updated_at=datetime.utcnow(),
            )
        )
        return result.rowcount == 1

    async def append_adjustment_history(
        self,
        user_id: int,
        adjustment: Adjustment,
        accepted_at: datetime,
    ) -> None:
        self.db.add(AdjustmentHistory(
            user_id=user_id,
            adjustment_type=adjustment.type.value,
            reason=adjustment.reason,
            field=adjustment.field,
            old_value=None if adjustment.current_value is None else str(adjustment.current_value),
            new_value=str(adjustment.proposed_new_value),
            accepted_at=accepted_at,
        ))
        await self.db.flush()

    async def fetch_adjustment_history(
        self,
        user_id: int,
        since: datetime,
    ) -> List[AdjustmentHistoryEntry]:
        result = await self.db.execute(
            select(AdjustmentHistory)
            .where(and_(
                AdjustmentHistory.user_id == user_id,
                AdjustmentHistory.accepted_at >= since
            ))
            .order_by(AdjustmentHistory.accepted_at.desc())
        )
        return [AdjustmentHistoryEntry.model_validate(row) for row in result.scalars().all()]

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
