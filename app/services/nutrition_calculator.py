from typing import Dict

from app.core.config import settings


class NutritionCalculator:
    MACRO_RATIOS = {
        "balanced": {"protein": 0.30, "carbs": 0.40, "fat": 0.30},
        "high_protein": {"protein": 0.40, "carbs": 0.30, "fat": 0.30},
        "high_carb": {"protein": 0.30, "carbs": 0.50, "fat": 0.20},
        "low_carb": {"protein": 0.35, "carbs": 0.25, "fat": 0.40}
    }

    CALORIE_SAFETY_FLOOR = settings.CALORIE_SAFETY_FLOOR
    CALORIE_CEILING = settings.CALORIE_CEILING

    @classmethod
    def clamp_calories(cls, calories: int) -> int:
        """Калорийность в допустимом диапазоне 1200-6000 ккал."""
        return max(cls.CALORIE_SAFETY_FLOOR, min(cls.CALORIE_CEILING, int(calories)))

    @classmethod
    def calculate_macros(cls, calories: int, profile: str = "balanced") -> Dict[str, int]:
        ratios = cls.MACRO_RATIOS.get(profile, cls.MACRO_RATIOS["balanced"])
        calories = cls.clamp_calories(calories)

        protein_g = int((calories * ratios["protein"]) / 4)
        carbs_g = int((calories * ratios["carbs"]) / 4)
        fat_g = int((calories * ratios["fat"]) / 9)

        return {
            "protein": protein_g,
            "carbs": carbs_g,
            "fat": fat_g
        }
