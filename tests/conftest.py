"""
Общие фикстуры для тестов движка прогресса.

Стратегия:
- Тестовое FastAPI-приложение создаётся без startup-событий (нет подключения к БД).
- ProgressRepository заменяется на AsyncMock (mock_repo) в тестах эндпоинтов.
- Для сценариев изменения цели используется InMemoryProgressRepository:
  он повторяет compare-and-swap по версии и транзакцию commit/rollback.
- JWT-токены подписываются тем же SECRET_KEY, что и в настройках.
"""

import asyncio
from datetime import date, datetime, timedelta
from typing import AsyncGenerator, List, Optional, Sequence

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from jose import jwt
from unittest.mock import AsyncMock

from app.api.router import api_router
from app.core.config import settings
from app.core.dependencies import get_current_user_id, get_progress_repository
from app.models.goal import GoalTypeEnum
from app.repositories.progress_repository import ProgressRepository
from app.schemas.adjustment import AdjustmentHistoryEntry
from app.schemas.goal import GoalParametersData
from app.schemas.progress import ProgressSampleData

TODAY = date(2026, 10, 19)


# ---------------------------------------------------------------------------
# Вспомогательные функции
# ---------------------------------------------------------------------------

def create_test_app() -> FastAPI:
    """Тестовое FastAPI-приложение без startup-событий."""
    test_app = FastAPI(title="Progress Engine Test App")
    test_app.include_router(api_router, prefix="/api/v1")
    return test_app


def make_auth_headers(user_id: int) -> dict:
    """Заголовки авторизации с валидным JWT для указанного пользователя."""
    token = jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


def make_goal(**overrides) -> GoalParametersData:
    data = dict(
        user_id=1,
        goal_type=GoalTypeEnum.reduce_weight,
        target_weight=75.0,
        target_date=None,
        target_calories=2000,
        tdee=2500,
        workout_days_per_week=3,
        start_date=TODAY - timedelta(days=60),
        macro_profile="balanced",
        sleep_target_hours=7.0,
        version=1,
    )
    data.update(overrides)
    return GoalParametersData(**data)


def make_samples(
    weights: Sequence[Optional[float]],
    step_days: int = 1,
    end: date = TODAY,
    calories: int = 2000,
    workouts: Sequence[int] = None,
    **fields,
) -> List[ProgressSampleData]:
    """Ряд записей, последняя на дату end, с шагом step_days."""
    start = end - timedelta(days=step_days * (len(weights) - 1))
    samples = []
    for i, weight in enumerate(weights):
        samples.append(ProgressSampleData(
            date=start + timedelta(days=step_days * i),
            weight=weight,
            calories_consumed=calories,
            workouts_completed=workouts[i] if workouts is not None else 0,
            **fields,
        ))
    return samples


class InMemoryProgressRepository:
    """Репозиторий в памяти с той же семантикой CAS и транзакций."""

    def __init__(
        self,
        goal: Optional[GoalParametersData] = None,
        samples: Sequence[ProgressSampleData] = (),
        history: Sequence[AdjustmentHistoryEntry] = (),
    ):
        self.goal = goal
        self.samples = list(samples)
        self.history = list(history)
        self.commits = 0
        self.rollbacks = 0
        self._goal_before = None
        self._pending_history = []

    async def fetch_samples(self, user_id: int, since_date: date):
        return [s for s in self.samples if s.date >= since_date]

    async def fetch_goal(self, user_id: int):
        if self.goal is None or self.goal.user_id != user_id:
            return None
        snapshot = self.goal.model_copy()
        # Отдаём управление циклу, чтобы параллельные запросы читали одну версию
        await asyncio.sleep(0)
        return snapshot

    async def persist_goal(self, user_id: int, partial_update: dict, expected_version: int) -> bool:
        if self.goal is None or self.goal.version != expected_version:
            return False
        self._goal_before = self.goal
        self.goal = self.goal.model_copy(update={**partial_update, "version": expected_version + 1})
        return True

    async def append_adjustment_history(self, user_id: int, adjustment, accepted_at: datetime) -> None:
        self._pending_history.append(AdjustmentHistoryEntry(
            adjustment_type=adjustment.type,
            reason=adjustment.reason,
            field=adjustment.field,
            old_value=None if adjustment.current_value is None else str(adjustment.current_value),
            new_value=str(adjustment.proposed_new_value),
            accepted_at=accepted_at,
        ))

    async def fetch_adjustment_history(self, user_id: int, since: datetime):
        return [h for h in self.history if h.accepted_at >= since]

    async def commit(self) -> None:
        self.history.extend(self._pending_history)
        self._pending_history = []
        self._goal_before = None
        self.commits += 1

    async def rollback(self) -> None:
        if self._goal_before is not None:
            self.goal = self._goal_before
        self._goal_before = None
        self._pending_history = []
        self.rollbacks += 1


# ---------------------------------------------------------------------------
# Фикстуры
# ---------------------------------------------------------------------------

@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def goal_fixture() -> GoalParametersData:
    """Цель по снижению веса: 2000 ккал, 3 тренировки в неделю."""
    return make_goal()


@pytest.fixture
def memory_repo(goal_fixture) -> InMemoryProgressRepository:
    return InMemoryProgressRepository(goal=goal_fixture)


@pytest.fixture
def mock_repo() -> AsyncMock:
    """Мокированный ProgressRepository для эндпоинтов."""
    repo = AsyncMock(spec=ProgressRepository)
    repo.fetch_samples.return_value = []
    repo.fetch_goal.return_value = None
    repo.fetch_adjustment_history.return_value = []
    repo.persist_goal.return_value = True
    return repo


# ---------------------------------------------------------------------------
# HTTP-клиенты
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(mock_repo) -> AsyncGenerator[AsyncClient, None]:
    """Клиент без подмены пользователя: id берётся из JWT."""
    app = create_test_app()
    app.dependency_overrides[get_progress_repository] = lambda: mock_repo
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def user_client(mock_repo) -> AsyncGenerator[AsyncClient, None]:
    """Клиент, аутентифицированный как пользователь с id=1."""
    app = create_test_app()
    app.dependency_overrides[get_progress_repository] = lambda: mock_repo
    app.dependency_overrides[get_current_user_id] = lambda: 1
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
