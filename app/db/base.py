from datetime import datetime, timezone
import time
import uuid

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func

from app.core.db import Base

_last_seq = 0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_seq() -> int:
    """Строго возрастающий порядковый номер записи в пределах процесса"""
    global _last_seq
    _last_seq = max(time.time_ns(), _last_seq + 1)
    return _last_seq


class BaseModel(Base):
    """Общие колонки: идентификатор и отметки времени, назначаемые хранилищем"""
    __abstract__ = True

    uuid = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # CURRENT_TIMESTAMP в SQLite округляется до секунды, поэтому время ставится на стороне приложения
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )
