"""
Модульные тесты для NutritionCalculator.

Покрываемые методы:
- calculate_macros: граммы БЖУ по профилю
- clamp_calories: диапазон 1200-6000 ккал

Расчёт не зависит от БД или внешних сервисов.
"""

import pytest

from app.services.nutrition_calculator import NutritionCalculator

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# calculate_macros
# ---------------------------------------------------------------------------

def test_calculate_macros_balanced_2000():
    """30/40/30 от 2000 ккал: 150 г белка, 200 г углеводов, 66 г жира."""
    macros = NutritionCalculator.calculate_macros(2000, "balanced")
    assert macros == {"protein": 150, "carbs": 200, "fat": 66}


def test_calculate_macros_high_protein_more_protein_than_balanced():
    balanced = NutritionCalculator.calculate_macros(2000, "balanced")
    high_protein = NutritionCalculator.calculate_macros(2000, "high_protein")
    assert high_protein["protein"] > balanced["protein"]
    assert high_protein["carbs"] < balanced["carbs"]


def test_calculate_macros_all_values_positive():
    for profile in NutritionCalculator.MACRO_RATIOS:
        macros = NutritionCalculator.calculate_macros(1800, profile)
        assert all(v > 0 for v in macros.values())


def test_calculate_macros_unknown_profile_uses_balanced():
    assert NutritionCalculator.calculate_macros(2000, "unknown") == NutritionCalculator.calculate_macros(2000)


def test_calculate_macros_below_floor_uses_floor():
    """Меньше 1200 ккал не считаем, БЖУ как для 1200."""
    assert NutritionCalculator.calculate_macros(900) == NutritionCalculator.calculate_macros(1200)


# ---------------------------------------------------------------------------
# clamp_calories
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("calories,expected", [(800, 1200), (1200, 1200), (1850, 1850), (6000, 6000), (6500, 6000)])
def test_clamp_calories(calories, expected):
    assert NutritionCalculator.clamp_calories(calories) == expected


