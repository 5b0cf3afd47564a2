import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_current_user_id, get_progress_engine
from app.core.exceptions import (
    AdjustmentValidationError,
    ConcurrencyConflictError,
    GoalNotFoundError,
)
from app.schemas.adjustment import Adjustment
from app.schemas.goal import GoalParametersData
from app.schemas.progress import AnalysisResult
from app.services.progress_engine import ProgressEngine

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/analysis", response_model=AnalysisResult)
async def get_progress_analysis(
        user_id: int = Depends(get_current_user_id),
        engine: ProgressEngine = Depends(get_progress_engine)
):
    """Тренд, плато, прогноз с контрольными точками и предложения по плану"""
    return await engine.analyze(user_id)


@router.post("/adjustments/accept", response_model=GoalParametersData)
async def accept_adjustment(
        adjustment: Adjustment,
        user_id: int = Depends(get_current_user_id),
        engine: ProgressEngine = Depends(get_progress_engine)
):
    """Принять предложенную корректировку и обновить параметры цели"""
    try:
        return await engine.accept_adjustment(user_id, adjustment)
    except AdjustmentValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ConcurrencyConflictError as e:
        logger.warning(f"Конфликт версий цели пользователя {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Цель была изменена. Обновите данные и попробуйте снова"
        )
    except GoalNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Цель не найдена")
