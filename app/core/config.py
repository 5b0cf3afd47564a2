from typing import Dict, Tuple

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://progress_user:progress_password@db:5432/progress_db"
    SECRET_KEY: str = "SECRET_KEY_FOR_PROGRESS_ENGINE"
    ALGORITHM: str = "HS256"
    # При продакшн/обычной разработке лучше не пересоздавать БД на каждом старте
    RESET_DATABASE: bool = False
    DB_ECHO: bool = False

    # Окно анализа и доверие к тренду
    LOOKBACK_DAYS: int = 30
    MIN_TREND_SAMPLES: int = 3
    LOW_CONFIDENCE_CAP: int = 30
    FULL_CONFIDENCE_SAMPLES: int = 12

    # Ожидаемое изменение веса по целям, кг/неделю (нижняя, верхняя граница)
    GOAL_WEEKLY_BANDS: Dict[str, Tuple[float, float]] = {
        "reduce_weight": (-1.0, -0.5),
        "build_muscle": (0.1, 0.25),
        "maintain": (-0.2, 0.2),
        "increase_strength": (0.0, 0.25),
        "improve_endurance": (-0.25, 0.1),
    }
    RAPID_CHANGE_MARGIN_KG: float = 0.25
    MAINTAIN_DRIFT_KG: float = 0.3

    # Плато
    PLATEAU_TOLERANCE_KG: float = 0.1
    PLATEAU_MIN_DAYS: int = 14
    DELOAD_PLATEAU_DAYS: int = 21
    PLATEAU_CONSISTENCY_THRESHOLD: float = 60.0

    # Приверженность плану, %
    ADHERENCE_THRESHOLD: float = 70.0
    WORKOUT_ADHERENCE_FLOOR: float = 50.0
    CALORIE_ADHERENCE_TOLERANCE: float = 0.15

    # Границы корректировок
    CALORIE_SAFETY_FLOOR: int = 1200
    CALORIE_CEILING: int = 6000
    ADJUSTMENT_COOLDOWN_DAYS: int = 7
    DELOAD_DURATION_DAYS: int = 7
    DELOAD_MAX_DAYS: int = 14
    MIN_WORKOUT_DAYS: int = 2
    LOW_SLEEP_HOURS: float = 6.5
    SLEEP_TARGET_HOURS: float = 8.0
    LOW_WELLBEING_RATING: float = 3.0

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

settings = Settings()
