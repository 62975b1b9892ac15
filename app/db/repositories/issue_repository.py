from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import uuid

from app.db.models.issue import Issue as IssueModel
from app.domains.issues.entities import Issue


class IssueRepository:
    """Репозиторий для работы с задачами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, issue: Issue) -> Issue:
        """Создание задачи; идентификатор и время создания назначает хранилище"""
        db_issue = IssueModel(
            uuid=uuid.uuid4(),
            title=issue.title,
            description=issue.description,
            priority=issue.priority,
            status=issue.status,
            assigned_to=issue.assigned_to,
            created_by=issue.created_by
        )

        self.session.add(db_issue)
        await self.session.commit()
        await self.session.refresh(db_issue)
        return self._to_domain(db_issue)

    async def get_by_uuid(self, issue_uuid: uuid.UUID) -> Optional[Issue]:
        """Получение задачи по UUID"""
        result = await self.session.execute(
            select(IssueModel).where(IssueModel.uuid == issue_uuid)
        )
        db_issue = result.scalar_one_or_none()
        return self._to_domain(db_issue) if db_issue else None

    async def get_all(self) -> List[Issue]:
        """Полный снимок коллекции, новые сверху"""
        result = await self.session.execute(
            select(IssueModel).order_by(IssueModel.created_at.desc(), IssueModel.seq.desc())
        )
        return [self._to_domain(db_issue) for db_issue in result.scalars().all()]

    async def update(self, issue: Issue) -> Issue:
        """Обновление изменяемых полей задачи (created_by не меняется)"""
        db_issue = await self.session.get(IssueModel, issue.uuid)
        db_issue.title = issue.title
        db_issue.description = issue.description
        db_issue.priority = issue.priority
        db_issue.status = issue.status
        db_issue.assigned_to = issue.assigned_to

        await self.session.commit()
        await self.session.refresh(db_issue)
        return self._to_domain(db_issue)

    async def delete(self, issue_uuid: uuid.UUID) -> bool:
        """Удаление задачи"""
        stmt = delete(IssueModel).where(IssueModel.uuid == issue_uuid)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    def _to_domain(self, db_issue: IssueModel) -> Issue:
        """Преобразование модели БД в доменную сущность"""
        return Issue(
            uuid=db_issue.uuid,
            title=db_issue.title,
            description=db_issue.description or "",
            priority=db_issue.priority,
            status=db_issue.status,
            assigned_to=db_issue.assigned_to,
            created_by=db_issue.created_by,
            created_at=db_issue.created_at,
            updated_at=db_issue.updated_at,
            seq=db_issue.seq
        )
