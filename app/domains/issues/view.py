"""Отбор и упорядочивание задач для отображения.

visible_issues - чистая функция от снимка и фильтра. IssueView хранит только
последний снимок и выбранный фильтр и пересчитывает результат при изменении
любого из них.
"""
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from app.domains.issues.entities import Issue, IssuePriority, IssueStatus
from app.domains.issues.transitions import allowed_targets

ALL = "All"

StatusFilter = Union[IssueStatus, str]
PriorityFilter = Union[IssuePriority, str]


@dataclass(frozen=True)
class IssueFilter:
    status: StatusFilter = ALL
    priority: PriorityFilter = ALL

    @classmethod
    def parse(cls, status: Optional[str] = None, priority: Optional[str] = None) -> "IssueFilter":
        """Фильтр из строковых значений; None и "All" означают отсутствие ограничения"""
        return cls(
            status=ALL if status in (None, ALL) else IssueStatus(status),
            priority=ALL if priority in (None, ALL) else IssuePriority(priority),
        )

    def matches(self, issue: Issue) -> bool:
        return (
            (self.status == ALL or issue.status == self.status)
            and (self.priority == ALL or issue.priority == self.priority)
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "status": getattr(self.status, "value", self.status),
            "priority": getattr(self.priority, "value", self.priority),
        }


def _sort_key(issue: Issue):
    # Задачи без назначенного времени создания считаются самыми новыми;
    # при равном времени позже записанная задача идет выше
    created_at = issue.created_at
    seq = issue.seq if issue.seq is not None else 0
    if created_at is None:
        return (1, 0.0, seq)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (0, created_at.timestamp(), seq)


def sort_newest_first(issues: Sequence[Issue]) -> List[Issue]:
    return sorted(issues, key=_sort_key, reverse=True)


def visible_issues(snapshot: Sequence[Issue], issue_filter: IssueFilter) -> List[Issue]:
    """Видимое подмножество: конъюнкция фильтров, новые сверху"""
    return sort_newest_first([issue for issue in snapshot if issue_filter.matches(issue)])


def render_issue(issue: Issue) -> Dict[str, Any]:
    """Строка списка задач"""
    return {
        "uuid": str(issue.uuid) if issue.uuid is not None else None,
        "title": issue.title,
        "description": issue.description,
        "priority": issue.priority.value,
        "status": issue.status.value,
        "assigned_to": issue.assigned_to,
        "created_by": issue.created_by,
        "created_at": issue.created_at.isoformat() if issue.created_at else None,
        "created_label": issue.created_label(),
        "allowed_statuses": [status.value for status in allowed_targets(issue.status)],
    }


class IssueView:
    """Представление списка задач одного клиента"""

    def __init__(self, issue_filter: Optional[IssueFilter] = None):
        self.issue_filter = issue_filter or IssueFilter()
        self.snapshot: Sequence[Issue] = ()
        self.version = 0

    def on_snapshot(self, snapshot: Sequence[Issue], version: int) -> List[Dict[str, Any]]:
        self.snapshot = snapshot
        self.version = version
        return self.render()

    def set_filter(self, issue_filter: IssueFilter) -> List[Dict[str, Any]]:
        self.issue_filter = issue_filter
        return self.render()

    def visible(self) -> List[Issue]:
        return visible_issues(self.snapshot, self.issue_filter)

    def render(self) -> List[Dict[str, Any]]:
        return [render_issue(issue) for issue in self.visible()]

    def as_message(self) -> Dict[str, Any]:
        return {
            "type": "snapshot",
            "data": {
                "version": self.version,
                "filter": self.issue_filter.to_dict(),
                "issues": self.render(),
                "total": len(self.snapshot),
            },
        }

    def __repr__(self) -> str:
        return f"IssueView(filter={self.issue_filter}, version={self.version})"
