"""Правило переходов статуса задачи.

Разрешен любой переход, кроме прямого Open -> Done: задачу нужно сначала
взять в работу. Правило проверяется сервисом задач, через который проходят
все записи; запись в базу в обход сервиса его не соблюдает.
"""
from typing import List

from app.core.exceptions import TransitionError
from app.domains.issues.entities import IssueStatus

FORBIDDEN_TRANSITIONS = {
    (IssueStatus.OPEN, IssueStatus.DONE): "cannot move directly from Open to Done",
}


def validate_transition(current: IssueStatus, requested: IssueStatus) -> IssueStatus:
    """Возвращает новый статус или выбрасывает TransitionError с причиной"""
    current = IssueStatus(current)
    requested = IssueStatus(requested)

    reason = FORBIDDEN_TRANSITIONS.get((current, requested))
    if reason is not None:
        raise TransitionError(current, requested, reason)

    return requested


def is_transition_allowed(current: IssueStatus, requested: IssueStatus) -> bool:
    return (IssueStatus(current), IssueStatus(requested)) not in FORBIDDEN_TRANSITIONS


def allowed_targets(current: IssueStatus) -> List[IssueStatus]:
    """Статусы, которые можно предложить в селекторе задачи (включая текущий)"""
    return [status for status in IssueStatus if is_transition_allowed(current, status)]
