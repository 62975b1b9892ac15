import enum
import uuid
from datetime import datetime
from typing import Optional

JUST_NOW_LABEL = "Just now"
CREATED_AT_FORMAT = "%Y-%m-%d %H:%M"


class IssueStatus(str, enum.Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class IssuePriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Issue:
    """Сущность задачи домена Issues"""

    def __init__(
        self,
        uuid: Optional[uuid.UUID],
        title: str,
        created_by: str,
        description: str = "",
        priority: IssuePriority = IssuePriority.MEDIUM,
        status: IssueStatus = IssueStatus.OPEN,
        assigned_to: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        seq: Optional[int] = None
    ):
        self.uuid = uuid
        self.title = title
        self.description = description
        self.priority = IssuePriority(priority)
        self.status = IssueStatus(status)
        self.assigned_to = assigned_to
        self.created_by = created_by
        # None, пока хранилище не назначило время создания
        self.created_at = created_at
        self.updated_at = updated_at
        # Порядковый номер записи в хранилище, различает задачи с одинаковым временем
        self.seq = seq

    def created_label(self) -> str:
        """Подпись времени создания для отображения"""
        if self.created_at is None:
            return JUST_NOW_LABEL
        return self.created_at.strftime(CREATED_AT_FORMAT)

    def change_status(self, requested: IssueStatus) -> bool:
        """Смена статуса через валидатор переходов.

        Возвращает False, если статус не изменился (запись не нужна).
        При запрещенном переходе выбрасывает TransitionError и оставляет статус прежним.
        """
        from app.domains.issues.transitions import validate_transition

        new_status = validate_transition(self.status, requested)
        if new_status == self.status:
            return False
        self.status = new_status
        return True

    def reassign(self, assignee: Optional[str]) -> None:
        """Назначение исполнителя; пустая строка снимает назначение"""
        self.assigned_to = assignee.strip() if assignee and assignee.strip() else None

    @classmethod
    def create_issue(
        cls,
        title: str,
        created_by: str,
        description: str = "",
        priority: IssuePriority = IssuePriority.MEDIUM,
        assigned_to: Optional[str] = None
    ) -> "Issue":
        """Создание новой задачи; идентификатор и время назначает хранилище"""
        issue = cls(
            uuid=None,
            title=title,
            created_by=created_by,
            description=description,
            priority=priority,
            status=IssueStatus.OPEN,
        )
        issue.reassign(assigned_to)
        return issue

    def __eq__(self, other) -> bool:
        if not isinstance(other, Issue):
            return False
        if self.uuid is None or other.uuid is None:
            return self is other
        return self.uuid == other.uuid

    def __hash__(self) -> int:
        return hash(self.uuid) if self.uuid is not None else id(self)

    def __repr__(self) -> str:
        return f"Issue(uuid={self.uuid}, title={self.title}, status={self.status.value})"
