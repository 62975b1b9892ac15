"""Хранилище последнего полного снимка задач.

Снимок заменяется целиком при каждой публикации и никогда не изменяется
по частям. Писатель один (сервис задач после записи в хранилище), читают
детектор дубликатов и представления.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from app.domains.issues.entities import Issue

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Tuple[Issue, ...], int], Awaitable[None]]
SnapshotLoader = Callable[[], Awaitable[Sequence[Issue]]]


class SnapshotHub:
    """Владелец снимка и единственная живая подписка на его изменения"""

    def __init__(self):
        self._issues: Tuple[Issue, ...] = ()
        self._version = 0
        self._subscriber: Optional[SnapshotCallback] = None
        # Чтение коллекции и публикация выполняются одним писателем за раз
        self._lock = asyncio.Lock()

    @property
    def issues(self) -> Tuple[Issue, ...]:
        return self._issues

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Регистрация подписчика; одновременно допускается только один"""
        if self._subscriber is not None:
            raise RuntimeError("Snapshot subscription is already established")
        self._subscriber = callback

        def unsubscribe() -> None:
            if self._subscriber is callback:
                self._subscriber = None

        return unsubscribe

    async def publish(self, issues: Sequence[Issue]) -> int:
        """Замена снимка и уведомление подписчика"""
        self._issues = tuple(issues)
        self._version += 1
        logger.info(f"Published snapshot v{self._version} with {len(self._issues)} issues")

        if self._subscriber is not None:
            try:
                await self._subscriber(self._issues, self._version)
            except Exception:
                logger.exception(f"Snapshot subscriber failed for v{self._version}")

        return self._version

    async def refresh(self, load: SnapshotLoader) -> int:
        """Загрузка полной коллекции и ее публикация под общей блокировкой.

        Коллекция читается только после завершения предыдущей публикации,
        поэтому более старое чтение не может заменить более новый снимок.
        """
        async with self._lock:
            issues = await load()
            return await self.publish(issues)
