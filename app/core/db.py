from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

# Базовый класс для моделей
Base = declarative_base()


class Database:
    """Асинхронный движок и фабрика сессий одного приложения"""

    def __init__(self, url: str, echo: bool = False):
        self.engine = create_async_engine(url, future=True, echo=echo)
        self.session_factory = sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_all(self) -> None:
        """Создание таблиц для всех зарегистрированных моделей"""
        # Импорт регистрирует модели в метаданных Base
        import app.db.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


# Функция для dependency injection в FastAPI
async def get_db(request: Request):
    async with request.app.state.database.session_factory() as session:
        yield session
