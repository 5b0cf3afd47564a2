"""
Модульные тесты для ProgressEngine: полный цикл анализа и принятия.

Репозиторий: InMemoryProgressRepository из conftest, дата анализа
передаётся явно, поэтому результат детерминирован.
"""

from datetime import datetime, timedelta

import pytest

from app.core.exceptions import AdjustmentCooldownError
from app.models.goal import GoalTypeEnum
from app.schemas.adjustment import AdjustmentHistoryEntry, AdjustmentType
from app.schemas.progress import PlateauSeverity, TrendDirection
from app.services.plan_generator import PlanGenerator
from app.services.progress_engine import ProgressEngine
from tests.conftest import TODAY, InMemoryProgressRepository, make_goal, make_samples

pytestmark = pytest.mark.unit

NOW = datetime(2026, 10, 19, 9, 0)


def every_other_day(count: int):
    return [1 if i % 2 == 0 else 0 for i in range(count)]


def slow_loss_samples():
    """22 дня, -0.03 кг/день (≈ -0.21 кг/нед), питание в норме."""
    weights = [round(80.0 - 0.03 * i, 2) for i in range(22)]
    return make_samples(weights, workouts=every_other_day(22))


def flat_samples():
    """29 дней без изменения веса при регулярном дневнике."""
    return make_samples([80.0] * 29, workouts=every_other_day(29))


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_analyze_slow_loss_proposes_single_calorie_cut():
    repo = InMemoryProgressRepository(goal=make_goal(), samples=slow_loss_samples())
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.trend.weekly_slope == pytest.approx(-0.21, abs=1e-6)
    assert result.plateau.is_plateau is False
    assert len(result.adjustments) == 1
    adjustment = result.adjustments[0]
    assert adjustment.type == AdjustmentType.CALORIE
    assert adjustment.proposed_new_value == 1850
    assert adjustment.priority == 2
    assert result.days_tracked == 22
    assert result.macros.calories == 2000
    assert result.prediction.estimable is True


@pytest.mark.asyncio
async def test_analyze_severe_plateau_orders_adjustments():
    """Плато 28 дней: разгрузка, затем калории, затем БЖУ."""
    repo = InMemoryProgressRepository(goal=make_goal(), samples=flat_samples())
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.plateau.is_plateau is True
    assert result.plateau.severity == PlateauSeverity.SEVERE
    assert [(a.type, a.priority) for a in result.adjustments] == [
        (AdjustmentType.DELOAD, 5),
        (AdjustmentType.CALORIE, 5),
        (AdjustmentType.MACRO, 3),
    ]
    assert result.adjustments[1].proposed_new_value == 1700


@pytest.mark.asyncio
async def test_analyze_single_sample_is_conservative():
    goal = make_goal(goal_type=GoalTypeEnum.build_muscle)
    repo = InMemoryProgressRepository(goal=goal, samples=make_samples([70.0]))
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.trend.slope == 0.0
    assert result.trend.confidence <= 30
    assert result.adjustments == []
    assert result.prediction.estimable is False
    assert result.milestones == []


@pytest.mark.asyncio
async def test_analyze_without_goal_returns_trend_only():
    repo = InMemoryProgressRepository(samples=slow_loss_samples())
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.trend.sample_count == 22
    assert result.adjustments == []
    assert result.macros is None
    assert result.plateau.is_plateau is False


@pytest.mark.asyncio
async def test_analyze_ignores_samples_outside_lookback():
    old = make_samples([90.0, 89.0, 88.0], end=TODAY - timedelta(days=40))
    repo = InMemoryProgressRepository(goal=make_goal(), samples=old + slow_loss_samples())
    result = await ProgressEngine(repo).analyze(1, today=TODAY)
    assert result.trend.sample_count == 22


@pytest.mark.asyncio
async def test_analyze_suppresses_type_in_cooldown():
    history = [AdjustmentHistoryEntry(
        adjustment_type=AdjustmentType.CALORIE,
        reason="weight_loss_too_slow",
        field="target_calories",
        new_value="2000",
        accepted_at=NOW - timedelta(days=2),
    )]
    repo = InMemoryProgressRepository(goal=make_goal(), samples=slow_loss_samples(), history=history)
    result = await ProgressEngine(repo).analyze(1, today=TODAY)
    assert result.adjustments == []


@pytest.mark.asyncio
async def test_analyze_failure_degrades_to_empty_result(monkeypatch):
    def broken(*args, **kwargs):
        raise ZeroDivisionError("boom")

    monkeypatch.setattr(PlanGenerator, "generate", broken)
    repo = InMemoryProgressRepository(goal=make_goal(), samples=slow_loss_samples())

    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.adjustments == []
    assert result.trend.confidence == 0
    assert result.days_tracked == 22


@pytest.mark.asyncio
async def test_analyze_is_idempotent():
    repo = InMemoryProgressRepository(goal=make_goal(), samples=flat_samples())
    engine = ProgressEngine(repo)
    assert await engine.analyze(1, today=TODAY) == await engine.analyze(1, today=TODAY)


# ---------------------------------------------------------------------------
# accept_adjustment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_accept_then_reanalyze_and_repeat():
    """Принятая корректировка меняет цель и не предлагается повторно 7 дней."""
    repo = InMemoryProgressRepository(goal=make_goal(), samples=slow_loss_samples())
    engine = ProgressEngine(repo)

    proposal = (await engine.analyze(1, today=TODAY)).adjustments[0]
    updated = await engine.accept_adjustment(1, proposal, now=NOW)

    assert updated.target_calories == 1850
    assert updated.version == 2

    again = await engine.analyze(1, today=TODAY)
    assert all(a.type != AdjustmentType.CALORIE for a in again.adjustments)
    assert again.macros.calories == 1850

    with pytest.raises(AdjustmentCooldownError):
        await engine.accept_adjustment(1, proposal, now=NOW)


# ---------------------------------------------------------------------------
# Сводка для дашборда
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_analyze_reports_overview_insights_and_summary():
    repo = InMemoryProgressRepository(goal=make_goal(), samples=slow_loss_samples())
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.overview.weight_change_kg == pytest.approx(-0.63)
    assert result.overview.direction == TrendDirection.LOSING
    assert result.overview.consistency_score == 100.0
    assert result.insights[0].title == "Вес снижается"
    assert "изменить калорийность на -150 ккал" in result.summary
    assert result.weekly_report.next_week_goals
    assert len(result.milestones) == 4
    assert result.milestones == result.prediction.milestones


@pytest.mark.asyncio
async def test_analyze_on_track_summary_says_no_changes():
    """-0.7 кг/нед в полосе снижения: корректировок нет, сводка об этом говорит."""
    weights = [round(80.0 - 0.1 * i, 2) for i in range(22)]
    samples = make_samples(weights, workouts=every_other_day(22))
    repo = InMemoryProgressRepository(goal=make_goal(), samples=samples)
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.adjustments == []
    assert "корректировки сейчас не нужны" in result.summary


@pytest.mark.asyncio
async def test_analyze_without_goal_has_no_summary():
    repo = InMemoryProgressRepository(samples=slow_loss_samples())
    result = await ProgressEngine(repo).analyze(1, today=TODAY)

    assert result.summary == ""
    assert result.overview.direction == TrendDirection.LOSING
    assert all(i.title != "Вес снижается" for i in result.insights)
