from app.core.config import settings
from app.core.base import Base
from app.core.db import engine


async def init_database():
    """Инициализация базы данных"""
    # Импортируем ВСЕ модели, чтобы они попали в metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        # Удаляем все таблицы если RESET_DATABASE=true
        if settings.RESET_DATABASE:
            print("🧹 RESET_DATABASE=true - пересоздаем БД")
            await conn.run_sync(Base.metadata.drop_all)

        # Создаем все таблицы
        await conn.run_sync(Base.metadata.create_all)
        print("✅ Таблицы БД созданы/проверены")
