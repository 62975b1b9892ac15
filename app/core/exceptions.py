"""Ошибки предметной области трекера задач.

TransitionError - локальная ошибка валидации, до хранилища не доходит.
AuthError - неверные учетные данные или токен, текст показывается как есть.
StoreOperationFailure - сбой операции хранилища; локальное состояние не меняется.
"""


class IssueTrackerError(Exception):
    """Базовая ошибка приложения"""


class ValidationError(IssueTrackerError):
    """Локально обнаруженное нарушение правил"""


class TransitionError(ValidationError):
    """Запрещенный переход статуса"""

    def __init__(self, current, requested, reason: str):
        super().__init__(reason)
        self.current = current
        self.requested = requested
        self.reason = reason


class AuthError(IssueTrackerError):
    """Ошибка аутентификации"""


class StoreOperationFailure(IssueTrackerError):
    """Сбой create/update/delete/subscribe во внешнем хранилище"""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
