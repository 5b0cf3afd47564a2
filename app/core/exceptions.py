"""Типизированные ошибки движка прогресса.

Ошибки анализа (InsufficientDataError, NotEstimableError) перехватываются
внутри сервисов и превращаются в консервативные значения по умолчанию.
Ошибки изменения плана пробрасываются вызывающему коду.
"""


class ProgressEngineError(Exception):
    """Базовая ошибка движка прогресса."""


class InsufficientDataError(ProgressEngineError):
    """Недостаточно точек с весом для построения тренда."""


class NotEstimableError(ProgressEngineError):
    """Срок достижения цели не может быть оценён (нулевой или обратный тренд)."""


class AdjustmentValidationError(ProgressEngineError):
    """Предложенное значение корректировки нарушает допустимые границы."""


class AdjustmentCooldownError(AdjustmentValidationError):
    """Корректировка того же типа уже принималась в пределах периода охлаждения."""


class ConcurrencyConflictError(ProgressEngineError):
    """Версия параметров цели изменилась, нужно перечитать данные и повторить."""


class GoalNotFoundError(ProgressEngineError):
    """У пользователя нет активной цели."""
