from sqlalchemy import BigInteger, Column, String, Text, Enum

from app.db.base import BaseModel, next_seq
from app.domains.issues.entities import IssuePriority, IssueStatus


class Issue(BaseModel):
    __tablename__ = "issues"

    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    priority = Column(Enum(IssuePriority), default=IssuePriority.MEDIUM, nullable=False)
    status = Column(Enum(IssueStatus), default=IssueStatus.OPEN, nullable=False, index=True)
    assigned_to = Column(String(255), nullable=True)
    # Идентификатор (email) автора; после создания не меняется
    created_by = Column(String(255), nullable=False)
    # Порядок вставки для задач с одинаковым created_at
    seq = Column(BigInteger, default=next_seq, nullable=False, index=True)
