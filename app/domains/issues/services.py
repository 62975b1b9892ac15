from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import uuid
import logging

from app.core.exceptions import StoreOperationFailure, TransitionError
from app.db.repositories.issue_repository import IssueRepository
from app.domains.issues.duplicates import MIN_CANDIDATE_LENGTH, find_similar
from app.domains.issues.entities import Issue, IssueStatus
from app.domains.issues.schemas import IssueCreate, IssueUpdate
from app.domains.issues.snapshot import SnapshotHub

logger = logging.getLogger(__name__)


class IssueService:
    """Сервис для работы с задачами.

    Все записи проходят через этот сервис: смена статуса проверяется
    валидатором переходов, а после каждой успешной записи полный снимок
    перечитывается из хранилища и публикуется в SnapshotHub.
    """

    def __init__(
        self,
        session: AsyncSession,
        hub: SnapshotHub,
        min_title_length: int = MIN_CANDIDATE_LENGTH
    ):
        self.session = session
        self.hub = hub
        self.min_title_length = min_title_length
        self.issue_repository = IssueRepository(session)

    def find_similar(self, title: str) -> List[Issue]:
        """Похожие задачи по последнему снимку"""
        return find_similar(title, self.hub.issues, min_length=self.min_title_length)

    async def create_issue(self, issue_data: IssueCreate, created_by: str) -> Tuple[Issue, List[Issue]]:
        """Создание задачи; похожие задачи возвращаются как предупреждение"""
        similar = self.find_similar(issue_data.title)

        issue = Issue.create_issue(
            title=issue_data.title,
            created_by=created_by,
            description=issue_data.description,
            priority=issue_data.priority,
            assigned_to=issue_data.assigned_to
        )

        try:
            created = await self.issue_repository.create(issue)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to create issue '{issue.title}': {e}")
            raise StoreOperationFailure("create", str(e)) from e

        if similar:
            logger.info(f"Issue {created.uuid} created with {len(similar)} similar issues")

        await self.refresh_snapshot()
        return created, similar

    async def get_issue(self, issue_uuid: uuid.UUID) -> Optional[Issue]:
        """Получение задачи по UUID"""
        return await self.issue_repository.get_by_uuid(issue_uuid)

    async def list_issues(self) -> List[Issue]:
        return await self.issue_repository.get_all()

    async def update_issue(self, issue_uuid: uuid.UUID, update_data: IssueUpdate) -> Optional[Issue]:
        """Частичное обновление задачи.

        Смена статуса проверяется до записи; при запрещенном переходе
        выбрасывается TransitionError, и хранилище не затрагивается.
        """
        issue = await self.issue_repository.get_by_uuid(issue_uuid)

        if not issue:
            return None

        fields = update_data.model_dump(exclude_unset=True)
        changed = False

        if fields.get("status") is not None:
            try:
                changed = issue.change_status(fields["status"])
            except TransitionError as e:
                logger.info(f"Rejected transition for issue {issue_uuid}: {e.reason}")
                raise

        if "title" in fields and fields["title"] and fields["title"] != issue.title:
            issue.title = fields["title"]
            changed = True

        if "description" in fields and fields["description"] is not None \
                and fields["description"] != issue.description:
            issue.description = fields["description"]
            changed = True

        if fields.get("priority") is not None and fields["priority"] != issue.priority:
            issue.priority = fields["priority"]
            changed = True

        if "assigned_to" in fields:
            previous = issue.assigned_to
            issue.reassign(fields["assigned_to"])
            changed = changed or issue.assigned_to != previous

        if not changed:
            # Ничего не изменилось (например, переход в тот же статус) - запись не нужна
            return issue

        try:
            updated = await self.issue_repository.update(issue)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to update issue {issue_uuid}: {e}")
            raise StoreOperationFailure("update", str(e)) from e

        await self.refresh_snapshot()
        return updated

    async def change_status(self, issue_uuid: uuid.UUID, requested: IssueStatus) -> Optional[Issue]:
        """Смена статуса задачи с проверкой перехода"""
        return await self.update_issue(issue_uuid, IssueUpdate(status=requested))

    async def delete_issue(self, issue_uuid: uuid.UUID) -> bool:
        """Удаление задачи"""
        try:
            deleted = await self.issue_repository.delete(issue_uuid)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to delete issue {issue_uuid}: {e}")
            raise StoreOperationFailure("delete", str(e)) from e

        if deleted:
            await self.refresh_snapshot()
        return deleted

    async def refresh_snapshot(self) -> int:
        """Перечитывание полной коллекции и публикация нового снимка"""
        try:
            return await self.hub.refresh(self.issue_repository.get_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load issue snapshot: {e}")
            raise StoreOperationFailure("subscribe", str(e)) from e
