from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.config import settings
from app.repositories.progress_repository import ProgressRepository
from app.services.progress_engine import ProgressEngine


security = HTTPBearer()


def get_progress_repository(db: AsyncSession = Depends(get_db)) -> ProgressRepository:
    """Фабрика репозитория, инжектируется в эндпоинты через Depends."""
    return ProgressRepository(db)


def get_progress_engine(
        repo: ProgressRepository = Depends(get_progress_repository),
) -> ProgressEngine:
    return ProgressEngine(repo)


async def get_current_user_id(
        credentials: HTTPAuthorizationCredentials = Depends(security),
) -> int:
    """Достаёт id пользователя из уже выданного access-токена."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Невалидный токен доступа",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        return int(user_id)
    except (JWTError, ValueError):
        raise credentials_exception
