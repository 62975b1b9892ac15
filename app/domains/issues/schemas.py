from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
import uuid
from datetime import datetime

from app.domains.issues.entities import IssuePriority, IssueStatus


class IssueBase(BaseModel):
    """Базовая схема задачи"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=100000)
    priority: IssuePriority = IssuePriority.MEDIUM
    assigned_to: Optional[str] = Field(None, max_length=255)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class IssueCreate(IssueBase):
    """Схема для создания задачи"""
    pass


class IssueUpdate(BaseModel):
    """Схема для частичного обновления задачи"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=100000)
    priority: Optional[IssuePriority] = None
    status: Optional[IssueStatus] = None
    assigned_to: Optional[str] = Field(None, max_length=255)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip() if v else v


class IssueResponse(BaseModel):
    """Схема для ответа с данными задачи"""
    uuid: uuid.UUID
    title: str
    description: str
    priority: IssuePriority
    status: IssueStatus
    assigned_to: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None
    created_label: str
    allowed_statuses: List[IssueStatus]

    model_config = ConfigDict(from_attributes=True)


class SimilarIssue(BaseModel):
    """Похожая задача с контекстом для предупреждения"""
    uuid: uuid.UUID
    title: str
    status: IssueStatus
    priority: IssuePriority


class IssueCreateResponse(BaseModel):
    """Созданная задача и найденные до создания похожие задачи"""
    issue: IssueResponse
    similar_issues: List[SimilarIssue]


class IssueListResponse(BaseModel):
    """Схема для списка задач"""
    issues: List[IssueResponse]
    total: int
    status_filter: str
    priority_filter: str


class SimilarIssuesResponse(BaseModel):
    title: str
    similar_issues: List[SimilarIssue]


class TransitionRejected(BaseModel):
    """Отказ в смене статуса"""
    detail: str
    current_status: IssueStatus
    requested_status: IssueStatus
