from fastapi import APIRouter, Depends, HTTPException, Request, Response, status, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from app.core.auth import get_current_user
from app.core.db import get_db
from app.core.exceptions import TransitionError
from app.domains.identity.entities import User
from app.domains.issues.entities import Issue
from app.domains.issues.schemas import (
    IssueCreate, IssueUpdate, IssueResponse, IssueCreateResponse,
    IssueListResponse, SimilarIssue, SimilarIssuesResponse, TransitionRejected
)
from app.domains.issues.services import IssueService
from app.domains.issues.transitions import allowed_targets
from app.domains.issues.view import IssueFilter, visible_issues

router = APIRouter(prefix="/issues", tags=["issues"])


def get_issue_service(request: Request, db: AsyncSession = Depends(get_db)) -> IssueService:
    return IssueService(
        db,
        request.app.state.hub,
        min_title_length=request.app.state.settings.duplicate_min_title_length
    )


def to_response(issue: Issue) -> IssueResponse:
    return IssueResponse(
        uuid=issue.uuid,
        title=issue.title,
        description=issue.description,
        priority=issue.priority,
        status=issue.status,
        assigned_to=issue.assigned_to,
        created_by=issue.created_by,
        created_at=issue.created_at,
        created_label=issue.created_label(),
        allowed_statuses=allowed_targets(issue.status)
    )


def to_similar(issues: List[Issue]) -> List[SimilarIssue]:
    return [
        SimilarIssue(uuid=issue.uuid, title=issue.title, status=issue.status, priority=issue.priority)
        for issue in issues
    ]


@router.post("", response_model=IssueCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    issue_data: IssueCreate,
    user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service)
):
    """Создание новой задачи; похожие задачи возвращаются как предупреждение"""
    issue, similar = await issue_service.create_issue(issue_data, created_by=user.identity)

    return IssueCreateResponse(issue=to_response(issue), similar_issues=to_similar(similar))


@router.get("", response_model=IssueListResponse)
async def list_issues(
    status_filter: Optional[str] = Query("All", alias="status"),
    priority_filter: Optional[str] = Query("All", alias="priority"),
    user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service)
):
    """Список задач с фильтрами по статусу и приоритету"""
    try:
        issue_filter = IssueFilter.parse(status_filter, priority_filter)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    issues = await issue_service.list_issues()
    visible = visible_issues(issues, issue_filter)
    selected = issue_filter.to_dict()

    return IssueListResponse(
        issues=[to_response(issue) for issue in visible],
        total=len(visible),
        status_filter=selected["status"],
        priority_filter=selected["priority"]
    )


@router.get("/similar", response_model=SimilarIssuesResponse)
async def similar_issues(
    title: str = Query(""),
    user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service)
):
    """Похожие задачи для вводимого заголовка"""
    return SimilarIssuesResponse(title=title, similar_issues=to_similar(issue_service.find_similar(title)))


@router.get("/{issue_uuid}", response_model=IssueResponse)
async def get_issue(
    issue_uuid: uuid.UUID,
    user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service)
):
    """Получение задачи по UUID"""
    issue = await issue_service.get_issue(issue_uuid)

    if not issue:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found"
        )

    return to_response(issue)


@router.patch(
    "/{issue_uuid}",
    response_model=IssueResponse,
    responses={status.HTTP_409_CONFLICT: {"model": TransitionRejected}}
)
async def update_issue(
    issue_uuid: uuid.UUID,
    update_data: IssueUpdate,
    user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service)
):
    """Частичное обновление задачи (статус, назначение, поля)"""
    try:
        issue = await issue_service.update_issue(issue_uuid, update_data)
    except TransitionError as e:
        rejected = TransitionRejected(
            detail=e.reason,
            current_status=e.current,
            requested_status=e.requested
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=rejected.model_dump(mode="json"))

    if not issue:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found"
        )

    return to_response(issue)


@router.delete("/{issue_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_issue(
    issue_uuid: uuid.UUID,
    user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service)
):
    """Удаление задачи"""
    deleted = await issue_service.delete_issue(issue_uuid)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
